"""Pagination metadata shared by every paginated response."""

import math
from typing import List, Sequence, TypeVar

from imessage_archive.models import PaginatedResult, PaginationMetadata

T = TypeVar("T")


def create_pagination_metadata(total: int, limit: int, offset: int) -> PaginationMetadata:
    """
    Derive page bookkeeping from (total, limit, offset).

    Args:
        total: Number of rows matching the query
        limit: Page size, must be at least 1
        offset: Rows skipped before this page

    Returns:
        PaginationMetadata with hasMore, page and totalPages filled in

    Raises:
        ValueError: If limit is less than 1
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    return PaginationMetadata(
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + limit < total,
        page=offset // limit + 1,
        total_pages=math.ceil(total / limit),
    )


def paginate_list(items: Sequence[T], limit: int, offset: int) -> PaginatedResult:
    """Slice an in-memory list into one page and attach its metadata."""
    pagination = create_pagination_metadata(len(items), limit, offset)
    page: List[T] = list(items[offset:offset + limit])
    return PaginatedResult(data=page, pagination=pagination)
