"""Assemble flat and category-grouped FAQ output from fetched rows.

No I/O happens here; everything works on rows already fetched for one
processor invocation.
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from faq_display.services.faq.faq_content_repository import CATEGORY_TABLE
from faq_display.services.faq.identifiers import to_int
from faq_display.services.faq.record_resolver import RecordResolver, resolve_or_none
from faq_display.services.faq.relation_resolver import CategoryRelations

UNCATEGORIZED_UID = 0
UNCATEGORIZED_TITLE = "Uncategorized"

# Sort position for category uids without a fetched row
_UNKNOWN_POSITION = sys.maxsize

Row = Mapping[str, Any]


@dataclass
class CategoryIndex:
    """Category rows of one invocation in their global display order."""

    ordered_uids: List[int] = field(default_factory=list)
    rows_by_uid: Dict[int, Row] = field(default_factory=dict)
    position: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_rows(cls, rows: Sequence[Row]) -> "CategoryIndex":
        index = cls()
        for row in rows:
            uid = to_int(row.get("uid"))
            if uid <= 0 or uid in index.rows_by_uid:
                continue
            index.position[uid] = len(index.ordered_uids)
            index.ordered_uids.append(uid)
            index.rows_by_uid[uid] = row
        return index

    def sort(self, category_uids: Sequence[int]) -> List[int]:
        """Order ``category_uids`` by global position; unknown uids go last."""
        return sorted(
            category_uids, key=lambda uid: self.position.get(uid, _UNKNOWN_POSITION)
        )


class GroupingAssembler:
    """Builds the flat FAQ list and the per-category groups."""

    def __init__(
        self, faq_table: str, record_resolver: Optional[RecordResolver] = None
    ):
        self.faq_table = faq_table
        self.record_resolver = record_resolver

    def _entry(self, table: str, row: Row) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"data": row}
        if self.record_resolver is not None:
            entry["record"] = resolve_or_none(self.record_resolver, table, row)
        return entry

    def build_items(
        self,
        faq_rows: Sequence[Row],
        relations: CategoryRelations,
        index: CategoryIndex,
    ) -> List[Dict[str, Any]]:
        """Build one item per FAQ row with its categories in global order.

        Category uids without a fetched row (e.g. hidden categories) are
        skipped.
        """
        items = []
        for faq_row in faq_rows:
            faq_uid = to_int(faq_row.get("uid"))
            categories = [
                self._entry(CATEGORY_TABLE, index.rows_by_uid[category_uid])
                for category_uid in index.sort(relations.for_record(faq_uid))
                if category_uid in index.rows_by_uid
            ]
            item = self._entry(self.faq_table, faq_row)
            item["categories"] = categories
            items.append(item)
        return items

    def build_groups(
        self,
        items: Sequence[Dict[str, Any]],
        relations: CategoryRelations,
        index: CategoryIndex,
    ) -> List[Dict[str, Any]]:
        """Group items by category.

        An item appears in the group of every related category that has a
        row, and in the "Uncategorized" group only when it has no category
        relations at all (after filtering). An item related only to
        categories without a row (e.g. hidden ones) lands in no group.
        Groups follow the global category order; "Uncategorized" comes last
        and is left out when empty.
        """
        groups: List[Dict[str, Any]] = []
        group_by_uid: Dict[int, Dict[str, Any]] = {}
        for category_uid in index.ordered_uids:
            group = {
                "category": self._entry(CATEGORY_TABLE, index.rows_by_uid[category_uid]),
                "items": [],
            }
            groups.append(group)
            group_by_uid[category_uid] = group

        uncategorized: List[Dict[str, Any]] = []
        for item in items:
            category_uids = relations.for_record(to_int(item["data"].get("uid")))
            if not category_uids:
                uncategorized.append(item)
                continue
            for category_uid in category_uids:
                group = group_by_uid.get(category_uid)
                if group is not None:
                    group["items"].append(item)

        if uncategorized:
            groups.append(
                {
                    "category": {
                        "data": {
                            "uid": UNCATEGORIZED_UID,
                            "title": UNCATEGORIZED_TITLE,
                        }
                    },
                    "items": uncategorized,
                }
            )

        return groups
