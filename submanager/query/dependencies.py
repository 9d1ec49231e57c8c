"""Parse table query parameters (search, sort, direction, column filters)."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import Query, Request
from pydantic.alias_generators import to_snake

from submanager.query.table import SortConfig, SortDirection

RESERVED_PARAMS = {"search", "sort", "direction", "format", "limit", "offset"}


@dataclass
class TableQuery:
    search: str = ""
    filters: Dict[str, str] = field(default_factory=dict)
    sort: Optional[SortConfig] = None


def get_table_query(
    request: Request,
    search: str = Query("", description="Case-insensitive substring search"),
    sort: Optional[str] = Query(None, description="Column to sort by"),
    direction: Optional[SortDirection] = Query(None, description="asc or desc"),
) -> TableQuery:
    """Every query parameter other than search/sort/direction is a column filter."""
    filters = {
        to_snake(key): value
        for key, value in request.query_params.items()
        if key not in RESERVED_PARAMS
    }
    sort_config = None
    if sort:
        sort_config = SortConfig(to_snake(sort), direction or SortDirection.ASC)
    return TableQuery(search=search, filters=filters, sort=sort_config)
