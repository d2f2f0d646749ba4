"""
Image filtering service for list operations.

Applies keyword filtering and pagination to an owner's already fetched
image records. No data access happens here.
"""

from aws_lambda_powertools import Logger

from imagehost.core.filters.keyword_filter import KeywordFilter
from imagehost.core.filters.offset_pagination import OffsetPagination
from imagehost.core.models.image import Asset
from imagehost.core.models.pagination import PaginationInfo

logger = Logger(UTC=True)


class InMemoryImageFilter:
    """
    Orchestrates in-memory refinement of image listings:
    - Keyword matching on name, description and tags
    - Newest-first ordering
    - Offset-based pagination
    """

    def __init__(self) -> None:
        self._keyword_filter = KeywordFilter()
        self._pagination = OffsetPagination()

    def filter_by_keyword(self, items: list[Asset], *, keyword: str | None) -> list[Asset]:
        return self._keyword_filter.apply(items, keyword)

    @staticmethod
    def sort_newest_first(items: list[Asset]) -> list[Asset]:
        return sorted(items, key=lambda item: (item.created_at, item.image_id), reverse=True)

    def paginate(
        self,
        items: list[Asset],
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Asset], int, PaginationInfo]:
        """
        Apply offset-based pagination to a list of items.

        Returns:
            A tuple of (page_items, total_count, pagination_info)

        Raises:
            FilterError: If pagination parameters are invalid
        """
        try:
            self._pagination.validate(limit, offset)
        except Exception:
            logger.warning(
                "Invalid pagination parameters",
                extra={"limit": limit, "offset": offset},
            )
            raise

        page_items, total_count, _ = self._pagination.paginate(items, offset, limit)
        info = self._pagination.page_info(offset=offset, limit=limit, total_count=total_count)
        return page_items, total_count, info
