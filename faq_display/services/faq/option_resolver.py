"""Resolve processor options from configuration and page context.

An option named ``key`` may be given in three shapes::

    {"orderBy.": {"field": "faq_order", "ifEmpty": "title"}}   # nested reference
    {"orderBy.field": "faq_order"}                             # flattened reference
    {"orderBy": "title DESC"}                                  # literal

A nested reference is authoritative: when the context field is empty its
``ifEmpty`` fallback (or the default) wins. A flattened reference that finds
an empty context field falls through to the literal, then to the default.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from faq_display.services.faq.identifiers import normalize_integer_list, to_int


@dataclass(frozen=True)
class LiteralValue:
    value: Any


@dataclass(frozen=True)
class FieldReference:
    field: str
    if_empty: Optional[Any] = None
    # Flattened references give way to lower-priority sources when empty.
    falls_through: bool = False


OptionSource = Union[LiteralValue, FieldReference]

_UNSET = object()


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def is_truthy(value: Any) -> bool:
    """Truthiness of a configuration flag ("0", "", 0 and None are false)."""
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)


def option_sources(configuration: Mapping[str, Any], key: str) -> List[OptionSource]:
    """List the sources configured for ``key`` in priority order."""
    nested = configuration.get(f"{key}.")
    if isinstance(nested, Mapping) and nested.get("field") is not None:
        return [FieldReference(str(nested["field"]), nested.get("ifEmpty"))]

    sources: List[OptionSource] = []
    flattened = configuration.get(f"{key}.field")
    if flattened is not None:
        sources.append(FieldReference(str(flattened), falls_through=True))
    if configuration.get(key) is not None:
        sources.append(LiteralValue(configuration[key]))
    return sources


def _resolve_raw(
    configuration: Mapping[str, Any],
    context: Mapping[str, Any],
    key: str,
) -> Any:
    """Walk the sources for ``key``; returns _UNSET when the default applies."""
    for source in option_sources(configuration, key):
        if isinstance(source, LiteralValue):
            return source.value
        value = context.get(source.field)
        if not is_empty(value):
            return value
        if source.if_empty is not None:
            return source.if_empty
        if not source.falls_through:
            return _UNSET
    return _UNSET


def resolve_string(
    configuration: Mapping[str, Any],
    context: Mapping[str, Any],
    key: str,
    default: str,
) -> str:
    """Resolve a string option; empty results fall back to ``default``."""
    value = _resolve_raw(configuration, context, key)
    if value is _UNSET or is_empty(value):
        return default
    return str(value)


def resolve_int(
    configuration: Mapping[str, Any],
    context: Mapping[str, Any],
    key: str,
    default: int,
) -> int:
    value = _resolve_raw(configuration, context, key)
    if value is _UNSET or is_empty(value):
        return default
    return to_int(value)


def resolve_id_list(
    configuration: Mapping[str, Any],
    context: Mapping[str, Any],
    key: str,
) -> List[int]:
    """Resolve an option holding ids (e.g. storage pids) into positive ints."""
    value = _resolve_raw(configuration, context, key)
    if value is _UNSET:
        return []
    return normalize_integer_list(value)


def config_string(configuration: Mapping[str, Any], key: str, default: str) -> str:
    """Read a plain (never field-referenced) string option."""
    value = configuration.get(key)
    return default if value is None else str(value)
