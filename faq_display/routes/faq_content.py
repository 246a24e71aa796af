"""FAQ content endpoints consumed by page rendering."""

import logging
import sqlite3
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from faq_display.core.config import Settings, get_settings
from faq_display.core.exceptions import ContentElementNotFoundError, StorageError
from faq_display.models.faq import ProcessRequest
from faq_display.services.faq.faq_processor import FAQProcessor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["FAQ Content"])


def get_faq_processor(request: Request) -> FAQProcessor:
    """Get FAQProcessor from request state."""
    if not hasattr(request.app.state, "faq_processor"):
        raise HTTPException(status_code=503, detail="FAQ processor not available")
    return request.app.state.faq_processor


def _content_configuration(settings: Settings) -> Dict[str, Any]:
    configuration = dict(settings.FAQ_PROCESSOR_CONFIGURATION)
    configuration.setdefault("table", settings.FAQ_TABLE)
    if settings.RESOLVE_RECORD_OBJECTS:
        configuration.setdefault("resolveToRecordObjects", 1)
    return configuration


@router.post("/faq/process")
def process_faqs(
    body: ProcessRequest,
    processor: FAQProcessor = Depends(get_faq_processor),
) -> Dict[str, Any]:
    """
    Run the FAQ processor with an explicit configuration and page context.

    - **configuration**: processor configuration (table, pidInList, orderBy, ...)
    - **data**: page context, e.g. the content element row
    - **processed_data**: data to augment with the FAQ output keys
    """
    try:
        return processor.process(body.configuration, body.data, body.processed_data)
    except sqlite3.Error as e:
        logger.exception("FAQ processing failed")
        raise StorageError(str(e), "read") from e


@router.get("/content/{uid}/faqs")
def content_element_faqs(
    uid: int = Path(..., gt=0, description="Content element uid"),
    processor: FAQProcessor = Depends(get_faq_processor),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Render the FAQ data of a stored content element.

    The content element row is the page context; the processor configuration
    comes from FAQ_PROCESSOR_CONFIGURATION.
    """
    try:
        content_element = processor.repository.get_content_element(uid)
        if content_element is None:
            raise ContentElementNotFoundError(uid)

        logger.debug(f"Processing FAQs for content element {uid}")
        return processor.process(_content_configuration(settings), content_element)
    except sqlite3.Error as e:
        logger.exception(f"FAQ processing failed for content element {uid}")
        raise StorageError(str(e), "read") from e
