"""Query-parameter dependencies shared by list endpoints."""

from typing import Annotated, Literal

from fastapi import Query

from storerate.schemas.common import PAGE_LIMIT_MAX, PageParams


def page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=PAGE_LIMIT_MAX)] = 10,
    sort_order: Annotated[Literal["asc", "desc"], Query(alias="sortOrder")] = "desc",
) -> PageParams:
    """Dependency: page/limit/sortOrder query parameters."""
    return PageParams(page=page, limit=limit, sort_order=sort_order)
