"""
Offset-based pagination utilities.
"""

from typing import TypeVar

from imagehost.core.models.errors import FilterError
from imagehost.core.models.pagination import PaginationInfo
from imagehost.core.utils.constants import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    MAX_LIMIT,
    MIN_LIMIT,
)

T = TypeVar("T")


class OffsetPagination:
    """
    Offset-based pagination helper.

    Typical usage:
    1. Validate offset and limit parameters
    2. Slice the full, already sorted list
    3. Build the pagination metadata for the response
    """

    @staticmethod
    def paginate(
        items: list[T],
        offset: int = DEFAULT_OFFSET,
        limit: int = DEFAULT_LIMIT,
    ) -> tuple[list[T], int, bool]:
        """
        Paginate a list of items using offset and limit.

        Returns:
            ``(page_items, total_count, has_more)``

        Example:
            paginate([1, 2, 3, 4, 5], offset=0, limit=2)

            → ([1, 2], 5, True)
        """
        total_count = len(items)
        page_items = items[offset : offset + limit]
        has_more = offset + limit < total_count

        return page_items, total_count, has_more

    @staticmethod
    def validate(limit: int, offset: int) -> None:
        """
        Validate pagination parameters.

        Raises:
            FilterError: If limit is outside [MIN_LIMIT, MAX_LIMIT] or the
                offset is negative
        """
        if limit < MIN_LIMIT:
            raise FilterError(
                message=f"Limit must be at least {MIN_LIMIT}",
                details={"limit": limit},
            )

        if limit > MAX_LIMIT:
            raise FilterError(
                message=f"Limit must not exceed {MAX_LIMIT}",
                details={"limit": limit},
            )

        if offset < 0:
            raise FilterError(
                message="Offset must be zero or a positive integer",
                details={"offset": offset},
            )

    @staticmethod
    def page_info(*, offset: int, limit: int, total_count: int) -> PaginationInfo:
        """Pagination metadata for API responses."""
        return PaginationInfo.for_page(offset=offset, limit=limit, total_count=total_count)
