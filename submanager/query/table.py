"""Search, filter and sort over fetched table rows.

``apply_table_query`` is a pure function of its arguments: it never mutates
the input list and keeps no state between calls.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic.alias_generators import to_snake

from submanager.subscriptions.status import effective_status

PACKAGE_FILTER = "package"
STATUS_FILTER = "status"
ID_PREFIX_LENGTH = 8


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortConfig:
    key: Optional[str] = None
    direction: Optional[SortDirection] = None

    @property
    def active(self) -> bool:
        return bool(self.key) and self.direction is not None


def next_sort(current: Optional[SortConfig], key: str) -> SortConfig:
    """Cycle a column through asc, desc, unsorted; a new column starts at asc."""
    if current is None or current.key != key or current.direction is None:
        return SortConfig(key, SortDirection.ASC)
    if current.direction == SortDirection.ASC:
        return SortConfig(key, SortDirection.DESC)
    return SortConfig(key, None)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _get(row: Mapping[str, Any], key: str) -> Any:
    if key in row:
        return row[key]
    return row.get(to_snake(key))


def _matches_search(row: Mapping[str, Any], term: str, fields: Iterable[str]) -> bool:
    for field in fields:
        value = _text(_get(row, field))
        if to_snake(field) == "id":
            value = value[:ID_PREFIX_LENGTH]
        if term in value.lower():
            return True
    return False


def _subscriptions_of(row: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Customers expose their history; a subscription row stands for itself."""
    history = _get(row, "subscription_history")
    if history is not None:
        return list(history)
    if _get(row, "package_id") is not None:
        return [row]
    return []


def _matches_package(
    row: Mapping[str, Any], wanted: str, package_names: Mapping[str, str]
) -> bool:
    for subscription in _subscriptions_of(row):
        name = package_names.get(_get(subscription, "package_id"))
        if name is not None and name.lower() == wanted:
            return True
    return False


def _matches_status(row: Mapping[str, Any], wanted: str, today: Optional[date]) -> bool:
    return any(
        effective_status(subscription, today).value == wanted
        for subscription in _subscriptions_of(row)
    )


def _sort_rows(rows: List[Dict[str, Any]], sort: SortConfig) -> List[Dict[str, Any]]:
    """Stable sort; rows without a value go last in either direction."""
    present = [row for row in rows if _get(row, sort.key) is not None]
    missing = [row for row in rows if _get(row, sort.key) is None]

    def sort_key(row):
        value = _get(row, sort.key)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (list, dict)):
            return str(value)
        return value

    try:
        ordered = sorted(present, key=sort_key, reverse=sort.direction == SortDirection.DESC)
    except TypeError:
        ordered = sorted(
            present,
            key=lambda row: _text(_get(row, sort.key)),
            reverse=sort.direction == SortDirection.DESC,
        )
    return ordered + missing


def apply_table_query(
    rows: Sequence[Mapping[str, Any]],
    search: str = "",
    search_fields: Sequence[str] = (),
    filters: Optional[Mapping[str, Any]] = None,
    sort: Optional[SortConfig] = None,
    package_names: Optional[Mapping[str, str]] = None,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Return the rows matching search and filters, optionally sorted.

    search: case-insensitive substring over search_fields; an ``id`` field
        is matched against its first 8 characters only.
    filters: column -> value, compared case-insensitively. ``package``
        matches rows with a subscription to a package of that name and
        ``status`` matches on effective subscription status. Empty values
        are ignored.
    package_names: package id -> name, needed by the ``package`` filter.
    """
    result = [dict(row) for row in rows]

    term = (search or "").strip().lower()
    if term:
        result = [row for row in result if _matches_search(row, term, search_fields)]

    for key, value in (filters or {}).items():
        if value is None or _text(value) == "":
            continue
        wanted = _text(value).lower()
        if key == PACKAGE_FILTER:
            names = package_names or {}
            result = [row for row in result if _matches_package(row, wanted, names)]
        elif key == STATUS_FILTER:
            result = [row for row in result if _matches_status(row, wanted, today)]
        else:
            result = [row for row in result if _text(_get(row, key)).lower() == wanted]

    if sort is not None and sort.active:
        result = _sort_rows(result, sort)
    return result
