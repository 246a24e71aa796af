import os
import time

import psutil  # type: ignore[import-untyped]
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint that monitors system resources and service status.

    Returns "initializing" status until the content database is reachable.
    """
    cpu_percent = psutil.cpu_percent()
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")

    database_status = "initializing"
    database = getattr(request.app.state, "database", None)
    if database is not None and database.is_reachable():
        database_status = "healthy"

    overall_status = "healthy" if database_status == "healthy" else "initializing"

    # BUILD_ID is injected at image build time
    build_id = os.getenv("BUILD_ID", "unknown")

    return {
        "status": overall_status,
        "timestamp": int(time.time()),
        "build_id": build_id,
        "system": {
            "cpu_percent": cpu_percent,
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
        },
        "services": {"database": database_status},
    }


@router.get("/health/ready")
async def readiness_check():
    """
    Readiness probe that checks if the service is ready to handle requests.
    """
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """
    Liveness probe that checks if the service is running.
    """
    return {"status": "alive"}
