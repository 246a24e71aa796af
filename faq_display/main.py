"""
FastAPI application for the FAQ display service.
This module sets up the API server with routes, middleware, and error handling.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from faq_display.core.config import get_settings
from faq_display.core.error_handlers import (
    base_exception_handler,
    unhandled_exception_handler,
)
from faq_display.core.exceptions import BaseAppException
from faq_display.db.database import ContentDatabase
from faq_display.routes import faq_content, health
from faq_display.services.faq import (
    FAQContentRepository,
    FAQProcessor,
    PydanticRecordResolver,
)

# Configure logging
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("faq_display.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")

    settings = get_settings()
    app.state.settings = settings

    # Create data directories (avoid import-time I/O)
    settings.ensure_data_dirs()

    logger.info("Initializing content database...")
    database = ContentDatabase()
    database.initialize(settings.CONTENT_DB_PATH)
    app.state.database = database

    logger.info("Initializing FAQProcessor...")
    repository = FAQContentRepository(database)
    app.state.faq_processor = FAQProcessor(
        repository,
        record_resolver=PydanticRecordResolver(settings.FAQ_TABLE),
        default_table=settings.FAQ_TABLE,
    )
    logger.info("FAQProcessor ready")

    yield

    logger.info("Application shutdown...")


app = FastAPI(
    title=get_settings().PROJECT_NAME,
    docs_url="/api/docs",
    openapi_url=f"{get_settings().API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Toggle credentials off when wildcard is used (Starlette forbids wildcard + credentials)
_origins = get_settings().CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False if _origins == ["*"] else True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(faq_content.router, prefix=get_settings().API_V1_STR)

# Register specific application exceptions first
app.add_exception_handler(BaseAppException, base_exception_handler)  # type: ignore[arg-type]
# Then register generic exception handler as fallback
app.add_exception_handler(Exception, unhandled_exception_handler)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    # Bind to 0.0.0.0 only in DEBUG mode (container/development)
    host = "0.0.0.0" if settings.DEBUG else "127.0.0.1"

    uvicorn.run(
        "faq_display.main:app",
        host=host,
        port=8000,
        reload=settings.DEBUG,
    )
