"""Resolve record -> category relations from the category junction table."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Dict, List, Mapping, Sequence

from faq_display.services.faq.identifiers import to_int

logger = logging.getLogger(__name__)

RelationFetcher = Callable[[str, str, List[int]], List[Mapping[str, Any]]]


@dataclass
class CategoryRelations:
    """Category uids per record uid, plus the union over all records."""

    by_record: Dict[int, List[int]] = field(default_factory=dict)
    category_uids: List[int] = field(default_factory=list)

    def for_record(self, record_uid: int) -> List[int]:
        return list(self.by_record.get(record_uid, []))

    def restricted_to(self, allowed: Collection[int]) -> "CategoryRelations":
        """Copy keeping only categories in ``allowed``.

        Records whose categories are all removed keep an empty list.
        """
        allowed_set = set(allowed)
        return CategoryRelations(
            by_record={
                record_uid: [uid for uid in uids if uid in allowed_set]
                for record_uid, uids in self.by_record.items()
            },
            category_uids=[uid for uid in self.category_uids if uid in allowed_set],
        )


class RelationResolver:
    def __init__(self, fetch_relation_rows: RelationFetcher):
        self._fetch_relation_rows = fetch_relation_rows

    def resolve(
        self, table: str, category_field: str, record_uids: Sequence[int]
    ) -> CategoryRelations:
        """Fetch all relations for ``record_uids`` with a single query.

        Args:
            table: Source table name stored in the junction's ``tablenames``
            category_field: Relation field stored in ``fieldname``
            record_uids: Source record uids

        Returns:
            CategoryRelations with per-record lists in relation-row order
        """
        uids = [uid for uid in record_uids if uid > 0]
        if not uids:
            return CategoryRelations()

        rows = self._fetch_relation_rows(table, category_field, uids)

        by_record: Dict[int, Dict[int, None]] = {}
        all_categories: Dict[int, None] = {}

        for row in rows:
            record_uid = to_int(row["uid_foreign"])
            category_uid = to_int(row["uid_local"])
            if record_uid <= 0 or category_uid <= 0:
                continue
            by_record.setdefault(record_uid, {})[category_uid] = None
            all_categories[category_uid] = None

        logger.debug(
            f"Resolved {len(rows)} relation rows for {len(uids)} records "
            f"into {len(all_categories)} categories"
        )

        return CategoryRelations(
            by_record={uid: list(cats) for uid, cats in by_record.items()},
            category_uids=list(all_categories),
        )
