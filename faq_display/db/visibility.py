"""Frontend visibility rules applied to every content query.

Rows that are deleted, hidden, not yet started or already expired are
invisible to page visitors. Which rules apply depends on the columns a table
actually has, so a table without a ``starttime`` column is simply never
time-restricted.
"""

import logging
import sqlite3
import time
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

logger = logging.getLogger(__name__)


class VisibilityRestriction:
    """Builds WHERE fragments hiding rows a visitor must not see."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._columns: Dict[str, FrozenSet[str]] = {}

    def table_columns(self, conn: sqlite3.Connection, table: str) -> FrozenSet[str]:
        """Return the column names of ``table``.

        ``table`` must already be a validated identifier.
        """
        if table not in self._columns:
            rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
            self._columns[table] = frozenset(row["name"] for row in rows)
            logger.debug(f"Cached {len(rows)} columns of {table}")
        return self._columns[table]

    def clauses(
        self, conn: sqlite3.Connection, table: str, alias: Optional[str] = None
    ) -> Tuple[List[str], List[Any]]:
        """Build visibility conditions for ``table``.

        Args:
            conn: Connection used to inspect the table
            table: Validated table name
            alias: Alias the table carries in the surrounding query

        Returns:
            Tuple of (SQL condition fragments, positional parameters)
        """
        columns = self.table_columns(conn, table)
        prefix = f"{alias}." if alias else ""
        now = int(self._clock())

        conditions: List[str] = []
        params: List[Any] = []

        if "deleted" in columns:
            conditions.append(f"{prefix}deleted = 0")
        if "hidden" in columns:
            conditions.append(f"{prefix}hidden = 0")
        if "starttime" in columns:
            conditions.append(f"{prefix}starttime <= ?")
            params.append(now)
        if "endtime" in columns:
            conditions.append(f"({prefix}endtime = 0 OR {prefix}endtime > ?)")
            params.append(now)

        return conditions, params
