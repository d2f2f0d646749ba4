"""
Business logic for image listing and search.
"""

from aws_lambda_powertools import Logger

from imagehost.core.filters.in_memory_image_filter import InMemoryImageFilter
from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats
from imagehost.core.models.image import ListImagesResponse
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    AssetStatsRepository,
)

logger = Logger(UTC=True)


class ListService:
    """Application service responsible for listing an owner's images.

    This service coordinates:
    - Fetching the owner's live images from DynamoDB
    - Keyword filtering and newest-first ordering in memory
    - Pagination and view counts for the returned page
    """

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        stats: AssetStatsRepository | None = None,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.stats = stats or DynamoDBAssetStats()
        self.filters = InMemoryImageFilter()

    def list_images(
        self,
        *,
        user_id: str,
        keyword: str | None,
        offset: int,
        limit: int,
    ) -> ListImagesResponse:
        # Step 1: Live images of the owner
        items = self.metadata.list_user_assets(user_id=user_id)

        # Step 2: Keyword filter and ordering
        items = self.filters.filter_by_keyword(items, keyword=keyword)
        items = self.filters.sort_newest_first(items)

        # Step 3: Page, then view counts for that page only
        page_items, total, pagination = self.filters.paginate(items, offset=offset, limit=limit)
        views = self.stats.fetch_view_counts(image_ids=[item.image_id for item in page_items])

        images = [item.to_view(view_count=views.get(item.image_id, 0)) for item in page_items]

        logger.info(
            "Images listed successfully",
            extra={"user_id": user_id, "count": len(images), "total": total},
        )

        return ListImagesResponse(
            images=images,
            total_count=total,
            returned_count=len(images),
            pagination=pagination,
        )
