"""FAQ service package: category-aware FAQ retrieval and grouping."""

from faq_display.services.faq.faq_content_repository import FAQContentRepository
from faq_display.services.faq.faq_processor import FAQProcessor
from faq_display.services.faq.record_resolver import PydanticRecordResolver

__all__ = ["FAQContentRepository", "FAQProcessor", "PydanticRecordResolver"]
