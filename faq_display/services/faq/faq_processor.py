"""
FAQ processor: fetch FAQ rows for a content element, resolve their
categories, optionally filter by selected categories and group the result.

Output keys (defaults):
- "faqs": flat list, each item {"data": row, "categories": [{"data": row}, ...]}
- "faqsByCategory": grouped list, each group {"category": {"data": row}, "items": [...]}

Processor configuration keys:
- table: FAQ table name (default: tx_faq_item)
- pidInList / pidInList.field / pidInList.{field, ifEmpty}: storage pids
- recursive / recursive.field / recursive.{field, ifEmpty}: page tree depth (default: 0)
- orderBy / orderBy.field / orderBy.{field, ifEmpty}: FAQ ordering (default: sorting ASC)
- categoryField: relation field name in the junction table (default: categories)
- categoryOrderBy / categoryOrderBy.field / categoryOrderBy.{field, ifEmpty}:
  category ordering (default: sorting ASC)
- asFlat: key for the flat list (default: faqs)
- asGrouped (legacy alias: as): key for the grouped list (default: faqsByCategory)
- groupByCategoryField: page-context field enabling grouping when it equals 1
  (default: faq_group_by_category)
- filterByCategoryField: page-context field holding selected category uids
  (default: faq_filter_by_category)
- resolveToRecordObjects: attach a "record" to FAQ items, their categories and
  group categories when a record resolver is available
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from faq_display.services.faq.faq_content_repository import FAQContentRepository
from faq_display.services.faq.grouping import CategoryIndex, GroupingAssembler
from faq_display.services.faq.identifiers import (
    OrderBy,
    normalize_integer_list,
    sanitize_order_by,
    sanitize_table_name,
    to_int,
    unique_positive,
)
from faq_display.services.faq.option_resolver import (
    config_string,
    is_truthy,
    resolve_id_list,
    resolve_int,
    resolve_string,
)
from faq_display.services.faq.page_tree import PageTreeExpander
from faq_display.services.faq.record_resolver import RecordResolver
from faq_display.services.faq.relation_resolver import (
    CategoryRelations,
    RelationResolver,
)
from faq_display.utils.instrumentation import FAQ_PROCESSOR_RUNS, instrument_stage

logger = logging.getLogger(__name__)

DEFAULT_FAQ_TABLE = "tx_faq_item"
DEFAULT_CATEGORY_FIELD = "categories"
DEFAULT_ORDER_COLUMN = "sorting"
DEFAULT_AS_FLAT = "faqs"
DEFAULT_AS_GROUPED = "faqsByCategory"
DEFAULT_GROUP_BY_CATEGORY_FIELD = "faq_group_by_category"
DEFAULT_FILTER_BY_CATEGORY_FIELD = "faq_filter_by_category"


@dataclass
class ProcessorOptions:
    """Options of one invocation, resolved from configuration and page context."""

    table: str
    as_flat: str
    as_grouped: str
    category_field: str = DEFAULT_CATEGORY_FIELD
    faq_order: OrderBy = OrderBy(DEFAULT_ORDER_COLUMN, "ASC")
    category_order: OrderBy = OrderBy(DEFAULT_ORDER_COLUMN, "ASC")
    recursive: int = 0
    pids: List[int] = field(default_factory=list)
    group_enabled: bool = False
    filter_category_uids: List[int] = field(default_factory=list)
    resolve_records: bool = False

    @property
    def filter_active(self) -> bool:
        return bool(self.filter_category_uids)

    @classmethod
    def resolve(
        cls,
        configuration: Mapping[str, Any],
        data: Mapping[str, Any],
        default_table: str = DEFAULT_FAQ_TABLE,
    ) -> "ProcessorOptions":
        as_flat = config_string(configuration, "asFlat", DEFAULT_AS_FLAT)
        as_grouped = config_string(
            configuration,
            "asGrouped",
            config_string(configuration, "as", DEFAULT_AS_GROUPED),
        )
        group_field = config_string(
            configuration, "groupByCategoryField", DEFAULT_GROUP_BY_CATEGORY_FIELD
        )
        filter_field = config_string(
            configuration, "filterByCategoryField", DEFAULT_FILTER_BY_CATEGORY_FIELD
        )

        return cls(
            table=sanitize_table_name(config_string(configuration, "table", default_table)),
            as_flat=as_flat,
            as_grouped=as_grouped,
            category_field=config_string(
                configuration, "categoryField", DEFAULT_CATEGORY_FIELD
            ),
            faq_order=sanitize_order_by(
                resolve_string(configuration, data, "orderBy", DEFAULT_ORDER_COLUMN),
                DEFAULT_ORDER_COLUMN,
            ),
            category_order=sanitize_order_by(
                resolve_string(
                    configuration, data, "categoryOrderBy", DEFAULT_ORDER_COLUMN
                ),
                DEFAULT_ORDER_COLUMN,
            ),
            recursive=resolve_int(configuration, data, "recursive", 0),
            pids=resolve_id_list(configuration, data, "pidInList"),
            group_enabled=to_int(data.get(group_field, 0)) == 1,
            filter_category_uids=normalize_integer_list(data.get(filter_field)),
            resolve_records=is_truthy(configuration.get("resolveToRecordObjects")),
        )


@dataclass
class ProcessingContext:
    """State of one process() call; discarded when the call returns."""

    options: ProcessorOptions
    pids: List[int] = field(default_factory=list)
    faq_rows: List[Dict[str, Any]] = field(default_factory=list)
    relations: CategoryRelations = field(default_factory=CategoryRelations)
    # Category rows of this invocation, keyed by uid and in display order
    categories: CategoryIndex = field(default_factory=CategoryIndex)


class FAQProcessor:
    """Runs the FAQ pipeline for one content element per call."""

    def __init__(
        self,
        repository: FAQContentRepository,
        record_resolver: Optional[RecordResolver] = None,
        default_table: str = DEFAULT_FAQ_TABLE,
    ):
        self.repository = repository
        self.record_resolver = record_resolver
        self.default_table = default_table
        self.page_tree = PageTreeExpander(repository.fetch_child_page_uids)
        self.relation_resolver = RelationResolver(repository.fetch_relation_rows)

    def process(
        self,
        configuration: Mapping[str, Any],
        data: Mapping[str, Any],
        processed_data: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Augment ``processed_data`` with the flat and grouped FAQ lists.

        Args:
            configuration: Processor configuration
            data: Page context (the content element row)
            processed_data: Data produced so far; copied, never mutated

        Returns:
            Copy of ``processed_data`` with both output keys set (lists,
            possibly empty)

        Raises:
            sqlite3.Error: If the storage fails
        """
        FAQ_PROCESSOR_RUNS.inc()
        result: Dict[str, Any] = dict(processed_data or {})

        options = ProcessorOptions.resolve(configuration, data, self.default_table)
        result[options.as_flat] = []
        result[options.as_grouped] = []

        if not options.table:
            return result

        context = ProcessingContext(options=options)

        context.pids = self._expand_pids(options)
        if not context.pids:
            logger.debug("No storage pids resolved, skipping FAQ fetch")
            return result

        context.faq_rows = self._fetch_faq_rows(options, context.pids)
        if not context.faq_rows:
            return result

        context.relations = self._resolve_relations(options, context.faq_rows)
        context.categories = self._load_categories(options, context.relations)

        resolver = self.record_resolver if options.resolve_records else None
        assembler = GroupingAssembler(options.table, resolver)

        items = self._assemble_items(assembler, context)
        result[options.as_flat] = items
        if options.group_enabled:
            result[options.as_grouped] = self._assemble_groups(
                assembler, items, context
            )

        return result

    @instrument_stage("page_tree")
    def _expand_pids(self, options: ProcessorOptions) -> List[int]:
        return self.page_tree.expand(options.pids, options.recursive)

    @instrument_stage("faq_rows")
    def _fetch_faq_rows(
        self, options: ProcessorOptions, pids: List[int]
    ) -> List[Dict[str, Any]]:
        return self.repository.fetch_faq_rows(
            options.table,
            pids,
            options.faq_order,
            options.category_field,
            options.filter_category_uids,
        )

    @instrument_stage("relations")
    def _resolve_relations(
        self, options: ProcessorOptions, faq_rows: List[Dict[str, Any]]
    ) -> CategoryRelations:
        faq_uids = unique_positive([to_int(row.get("uid")) for row in faq_rows])
        relations = self.relation_resolver.resolve(
            options.table, options.category_field, faq_uids
        )
        # Categories outside the selection never reach items or groups.
        if options.filter_active:
            relations = relations.restricted_to(options.filter_category_uids)
        return relations

    @instrument_stage("category_rows")
    def _load_categories(
        self, options: ProcessorOptions, relations: CategoryRelations
    ) -> CategoryIndex:
        rows = self.repository.fetch_category_rows(
            relations.category_uids, options.category_order
        )
        return CategoryIndex.from_rows(rows)

    @instrument_stage("items")
    def _assemble_items(
        self, assembler: GroupingAssembler, context: ProcessingContext
    ) -> List[Dict[str, Any]]:
        return assembler.build_items(
            context.faq_rows, context.relations, context.categories
        )

    @instrument_stage("groups")
    def _assemble_groups(
        self,
        assembler: GroupingAssembler,
        items: List[Dict[str, Any]],
        context: ProcessingContext,
    ) -> List[Dict[str, Any]]:
        return assembler.build_groups(items, context.relations, context.categories)
