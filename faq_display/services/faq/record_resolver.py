"""Optional enrichment of raw rows into typed record objects."""

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from faq_display.core.exceptions import RecordResolutionError
from faq_display.models.faq import CategoryRecord, FAQRecord
from faq_display.services.faq.faq_content_repository import CATEGORY_TABLE

logger = logging.getLogger(__name__)


class RecordResolver(Protocol):
    def resolve(self, table: str, row: Mapping[str, Any]) -> Any:
        """Build a record object from ``row``.

        Raises:
            RecordResolutionError: If no record can be built
        """
        ...


class PydanticRecordResolver:
    """Resolves rows of known tables into pydantic record models."""

    def __init__(self, faq_table: str, models: Optional[Dict[str, Type[BaseModel]]] = None):
        self.models: Dict[str, Type[BaseModel]] = {
            faq_table: FAQRecord,
            CATEGORY_TABLE: CategoryRecord,
        }
        if models:
            self.models.update(models)

    def resolve(self, table: str, row: Mapping[str, Any]) -> BaseModel:
        model = self.models.get(table)
        if model is None:
            raise RecordResolutionError(table, "no record model registered")
        try:
            return model.model_validate(dict(row))
        except PydanticValidationError as e:
            raise RecordResolutionError(table, f"{e.error_count()} validation errors") from e


def resolve_or_none(
    resolver: Optional[RecordResolver], table: str, row: Mapping[str, Any]
) -> Any:
    """Resolve ``row`` if a resolver is available; failures become None."""
    if resolver is None:
        return None
    try:
        return resolver.resolve(table, row)
    except RecordResolutionError as e:
        logger.debug(f"Record resolution skipped: {e}")
        return None
