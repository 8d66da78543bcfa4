# core_forum_db/pagination.py
"""
Paginated result assembly
"""
from typing import Any, Sequence

from .types import PaginatedResult, PaginationInfo, PaginationRequest


def total_pages_for(total: int, per_page: int) -> int:
    """Ceiling division; zero rows means zero pages"""
    return (total + per_page - 1) // per_page if total > 0 else 0


def create_paginated_result(
    rows: Sequence[Any],
    total: int,
    request: PaginationRequest
) -> PaginatedResult:
    """
    Wrap a page of rows with navigation metadata

    ``has_prev`` only looks at the requested page number. The assembler cannot
    tell whether the request was out of range, so page 2 of an empty
    collection still reports a previous page.

    Args:
        rows: Rows of the current page
        total: Total number of matching rows
        request: The pagination request that produced ``rows``

    Returns:
        PaginatedResult
    """
    total_pages = total_pages_for(total, request.per_page)
    return PaginatedResult(
        data=list(rows),
        pagination=PaginationInfo(
            page=request.page,
            per_page=request.per_page,
            total=total,
            total_pages=total_pages,
            has_next=request.page < total_pages,
            has_prev=request.page > 1,
        ),
    )
