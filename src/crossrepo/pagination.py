"""Pagination assembly for `get_all` results."""

import math
from typing import Any, Sequence

from .schema import PaginatedResult, PaginationLinks, PaginationMeta, PaginationSpec


def _page_url(resource_url: str, page: int, limit: int) -> str:
    separator = "&" if "?" in resource_url else "?"
    return f"{resource_url}{separator}page={page}&limit={limit}"


def build_links(pagination: PaginationSpec, total_pages: int) -> PaginationLinks:
    """Navigation links for a zero-based page; empty when there is no such page."""
    url = pagination.resource_url
    if not url:
        return PaginationLinks()
    page, limit = pagination.page, pagination.limit
    last_page = max(total_pages - 1, 0)
    return PaginationLinks(
        first=_page_url(url, 0, limit),
        previous=_page_url(url, page - 1, limit) if page > 0 else "",
        next=_page_url(url, page + 1, limit) if page < last_page else "",
        last=_page_url(url, last_page, limit),
    )


def paginate(data: Sequence[Any], total: int, pagination: PaginationSpec) -> PaginatedResult:
    """Package one page of rows and the total match count.

    Row and count queries run independently, so under concurrent writes
    `total` may disagree with the rows in `data`.
    """
    total_pages = math.ceil(total / pagination.limit) if total else 0
    meta = PaginationMeta(
        item_count=len(data),
        total_items=total,
        items_per_page=pagination.limit,
        total_pages=total_pages,
        current_page=pagination.page,
    )
    return PaginatedResult(data=list(data), meta=meta, links=build_links(pagination, total_pages))
