"""In-memory search over the equipment list.

The whole catalogue is small enough to load once, so searching is a plain
filter: a record matches when the query is a case-insensitive substring of
any line item number, the name, the partial NSN or the alternate name. The
size label is intentionally not searched.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

__all__ = ["matches", "filter_records", "normalize_query"]

T = TypeVar("T")

# (attribute name, camelCase key) pairs so ORM rows, pydantic models and raw
# JSON dicts can all be searched.
_TEXT_FIELDS = (
    ("name", "name"),
    ("partial_code", "partialCode"),
    ("alternate_name", "alternateName"),
)


def normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


def _field(record: Any, attr: str, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key, record.get(attr))
    return getattr(record, attr, None)


def _haystack(record: Any) -> list[str]:
    values: list[str] = []
    line_items = _field(record, "line_item_numbers", "lineItemNumbers") or []
    if isinstance(line_items, str):
        line_items = [line_items]
    values.extend(str(code) for code in line_items if code is not None)
    for attr, key in _TEXT_FIELDS:
        value = _field(record, attr, key)
        if value is not None:
            values.append(str(value))
    return values


def matches(record: Any, query: str | None) -> bool:
    """Return True when ``record`` contains ``query`` in any searchable field."""

    needle = normalize_query(query)
    if not needle:
        return True
    return any(needle in value.lower() for value in _haystack(record))


def filter_records(records: Iterable[T], query: str | None) -> list[T]:
    """Stable filter: matching records keep their original relative order."""

    needle = normalize_query(query)
    items: Sequence[T] = list(records)
    if not needle:
        return list(items)
    return [record for record in items if matches(record, needle)]
