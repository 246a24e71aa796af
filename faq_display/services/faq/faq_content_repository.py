"""
SQLite-backed row access for the FAQ processor.

Security features implemented:
- Values are always bound as parameters
- Table and column names are interpolated only after matching [a-zA-Z0-9_]+
- Order direction is limited to ASC/DESC by OrderBy
- Visibility rules are applied to every content table except the junction
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from faq_display.db.database import ContentDatabase
from faq_display.db.visibility import VisibilityRestriction
from faq_display.services.faq.identifiers import OrderBy, is_identifier

logger = logging.getLogger(__name__)

PAGES_TABLE = "pages"
CATEGORY_TABLE = "sys_category"
CATEGORY_MM_TABLE = "sys_category_record_mm"
CONTENT_TABLE = "tt_content"


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


def _require_identifier(name: str) -> str:
    if not is_identifier(name):
        raise ValueError(f"Invalid SQL identifier: {name[:50]!r}")
    return name


class FAQContentRepository:
    """Read-only queries over pages, categories, relations and FAQ rows.

    Storage errors (sqlite3.Error) are not caught here.
    """

    def __init__(
        self,
        database: ContentDatabase,
        restriction: Optional[VisibilityRestriction] = None,
    ):
        self.database = database
        self.restriction = restriction or VisibilityRestriction()

    def _fetch_all(
        self, conn: sqlite3.Connection, sql: str, params: Sequence[Any]
    ) -> List[Dict[str, Any]]:
        return [dict(row) for row in conn.execute(sql, list(params)).fetchall()]

    def fetch_child_page_uids(self, parent_uids: Sequence[int]) -> List[int]:
        """Return uids of visible pages whose parent is in ``parent_uids``."""
        if not parent_uids:
            return []

        with self.database.get_connection() as conn:
            conditions, params = self.restriction.clauses(conn, PAGES_TABLE, "p")
            where = [f"p.pid IN ({_placeholders(parent_uids)})", *conditions]
            rows = self._fetch_all(
                conn,
                f"SELECT p.uid FROM {PAGES_TABLE} p "
                f"WHERE {' AND '.join(where)} ORDER BY p.sorting ASC, p.uid ASC",
                [*parent_uids, *params],
            )
        return [int(row["uid"]) for row in rows]

    def fetch_faq_rows(
        self,
        table: str,
        pids: Sequence[int],
        order_by: OrderBy,
        category_field: str,
        filter_category_uids: Sequence[int] = (),
    ) -> List[Dict[str, Any]]:
        """Fetch visible FAQ rows stored on ``pids``.

        With ``filter_category_uids`` only FAQs related to at least one of
        those categories are returned, each exactly once.

        Args:
            table: Validated FAQ table name
            pids: Storage pids
            order_by: Sanitized order for the FAQ table
            category_field: Relation field name in the junction table
            filter_category_uids: Category uids to filter by (OR semantics)

        Returns:
            List of row dicts
        """
        if not pids:
            return []
        _require_identifier(table)
        _require_identifier(order_by.column)

        with self.database.get_connection() as conn:
            conditions, visibility_params = self.restriction.clauses(conn, table, "i")

            joins = ""
            where = [f"i.pid IN ({_placeholders(pids)})", *conditions]
            params: List[Any] = [*pids, *visibility_params]
            group_by = ""

            if filter_category_uids:
                joins = f" INNER JOIN {CATEGORY_MM_TABLE} mm ON mm.uid_foreign = i.uid"
                where.extend(
                    [
                        "mm.tablenames = ?",
                        "mm.fieldname = ?",
                        f"mm.uid_local IN ({_placeholders(filter_category_uids)})",
                    ]
                )
                params.extend([table, category_field, *filter_category_uids])
                # One row per FAQ even when several relations match
                group_by = " GROUP BY i.uid"

            sql = (
                f"SELECT i.* FROM {table} i{joins} "
                f"WHERE {' AND '.join(where)}{group_by} "
                f"ORDER BY {order_by.sql('i')}"
            )
            rows = self._fetch_all(conn, sql, params)

        logger.debug(f"Fetched {len(rows)} rows from {table} for {len(pids)} pids")
        return rows

    def fetch_relation_rows(
        self, table: str, category_field: str, record_uids: Sequence[int]
    ) -> List[Dict[str, Any]]:
        """Fetch junction rows linking ``record_uids`` of ``table`` to categories."""
        if not record_uids:
            return []

        with self.database.get_connection() as conn:
            return self._fetch_all(
                conn,
                f"SELECT uid_foreign, uid_local FROM {CATEGORY_MM_TABLE} "
                "WHERE tablenames = ? AND fieldname = ? "
                f"AND uid_foreign IN ({_placeholders(record_uids)}) "
                "ORDER BY uid_foreign ASC, sorting_foreign ASC, sorting ASC, rowid ASC",
                [table, category_field, *record_uids],
            )

    def fetch_category_rows(
        self, category_uids: Sequence[int], order_by: OrderBy
    ) -> List[Dict[str, Any]]:
        """Fetch visible categories ordered by ``order_by`` then uid ascending."""
        if not category_uids:
            return []
        _require_identifier(order_by.column)

        with self.database.get_connection() as conn:
            conditions, params = self.restriction.clauses(conn, CATEGORY_TABLE, "c")
            where = [f"c.uid IN ({_placeholders(category_uids)})", *conditions]
            return self._fetch_all(
                conn,
                f"SELECT c.* FROM {CATEGORY_TABLE} c WHERE {' AND '.join(where)} "
                f"ORDER BY {order_by.sql('c')}, c.uid ASC",
                [*category_uids, *params],
            )

    def get_content_element(self, uid: int) -> Optional[Dict[str, Any]]:
        """Return the visible content element row ``uid``, or None."""
        with self.database.get_connection() as conn:
            conditions, params = self.restriction.clauses(conn, CONTENT_TABLE, "t")
            where = ["t.uid = ?", *conditions]
            rows = self._fetch_all(
                conn,
                f"SELECT t.* FROM {CONTENT_TABLE} t WHERE {' AND '.join(where)} LIMIT 1",
                [uid, *params],
            )
        return rows[0] if rows else None
