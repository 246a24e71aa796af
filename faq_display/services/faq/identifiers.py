"""Identifier validation and id-list normalization for SQL composition.

Table and column names end up interpolated into SQL text, so anything that
does not match the identifier pattern is rejected here before a query is
built.
"""

import logging
import math
import re
from typing import Any, List, NamedTuple

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
ORDER_BY_PATTERN = re.compile(r"^([a-zA-Z0-9_]+)\s+(ASC|DESC)$", re.IGNORECASE)
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


class OrderBy(NamedTuple):
    column: str
    direction: str  # "ASC" or "DESC"

    def sql(self, alias: str) -> str:
        return f"{alias}.{self.column} {self.direction}"


def is_identifier(value: str) -> bool:
    return bool(IDENTIFIER_PATTERN.match(value))


def sanitize_table_name(table: str) -> str:
    """Return the trimmed table name, or "" if it is not a plain identifier."""
    table = table.strip()
    if table == "":
        return ""
    if not is_identifier(table):
        logger.warning(f"Rejected invalid table name: {table[:50]!r}")
        return ""
    return table


def sanitize_order_by(order_by: str, default_column: str = "sorting") -> OrderBy:
    """Sanitize an order-by string into a column and direction.

    Accepted formats are ``"sorting"``, ``"sorting ASC"`` and
    ``"sorting DESC"`` (direction is case-insensitive). Anything else falls
    back to ``default_column`` ascending.

    Args:
        order_by: Raw order-by text from configuration or page context
        default_column: Column used when the input is unusable

    Returns:
        OrderBy with a safe column name and "ASC"/"DESC"
    """
    order_by = order_by.strip()
    if order_by == "":
        return OrderBy(default_column, "ASC")

    candidate = order_by
    direction = "ASC"

    match = ORDER_BY_PATTERN.match(order_by)
    if match:
        candidate = match.group(1)
        direction = match.group(2).upper()

    if not is_identifier(candidate):
        logger.warning(f"Discarded unsafe order-by input: {order_by[:50]!r}")
        return OrderBy(default_column, "ASC")

    return OrderBy(candidate, direction)


def to_int(value: Any) -> int:
    """Coerce a scalar to int the lenient way CMS field values need.

    Leading digits of a string are used ("12abc" -> 12); anything without
    them becomes 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if value is None:
        return 0
    match = _LEADING_INT_PATTERN.match(str(value))
    return int(match.group(1)) if match else 0


def normalize_integer_list(value: Any) -> List[int]:
    """Normalize a comma-separated string, int or sequence into unique positive ints.

    Order of first occurrence is kept. Non-positive and non-numeric entries
    are dropped silently.
    """
    if value is None or value == "":
        return []

    if isinstance(value, bool):
        return []

    if isinstance(value, int):
        return [value] if value > 0 else []

    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",")]
        candidates = [to_int(part) for part in parts if part != ""]
    elif isinstance(value, (list, tuple, set, frozenset)):
        candidates = [to_int(item) for item in value]
    else:
        return []

    return unique_positive(candidates)


def unique_positive(values: List[int]) -> List[int]:
    """Drop non-positive values and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(v for v in values if v > 0))
