"""Business logic for editing image metadata."""

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats
from imagehost.core.models.errors import ForbiddenError, NotFoundError, ValidationError
from imagehost.core.models.image import AssetView, ImagePatch
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    AssetStatsRepository,
)
from imagehost.core.services.public_resolver import is_valid_image_id
from imagehost.core.utils.constants import ERROR_CODE_IMAGE_NOT_FOUND
from imagehost.core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class UpdateService:
    """Applies owner edits to description, tags and visibility."""

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        stats: AssetStatsRepository | None = None,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.stats = stats or DynamoDBAssetStats()

    def update_image(self, image_id: str, patch: ImagePatch, *, requester_id: str) -> AssetView:
        """Apply ``patch`` to one of the requester's images.

        Raises:
            ValidationError: If the patch carries no fields
            NotFoundError: If the image does not exist or is deleted
            ForbiddenError: If the requester is not the owner
        """
        if patch.is_empty:
            raise ValidationError(message="No fields to update")

        asset = self.metadata.fetch_asset(image_id=image_id) if is_valid_image_id(image_id) else None
        if asset is None or asset.is_tombstoned:
            raise NotFoundError(message="Image not found", error_code=ERROR_CODE_IMAGE_NOT_FOUND)

        if asset.user_id != requester_id:
            logger.warning(
                "Update denied",
                extra={"image_id": image_id, "requester_id": requester_id},
            )
            raise ForbiddenError(
                message="You don't have permission to edit this image",
                details={"image_id": image_id},
            )

        changes = patch.changes()
        updated = self.metadata.update_asset(
            image_id=image_id,
            changes=changes,
            updated_at=utc_now_iso(),
        )

        views = self.stats.fetch_view_counts(image_ids=[image_id]).get(image_id, 0)

        logger.info(
            "Image metadata updated",
            extra={"image_id": image_id, "fields": sorted(changes)},
        )
        return updated.to_view(view_count=views)
