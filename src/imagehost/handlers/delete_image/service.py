"""Business logic for image deletion.

Deletion is a tombstone: the metadata record gets ``deleted_at`` under a
condition that it was not already set, which is what makes the image
unreachable and releases its bytes from the owner's quota. The blob is
removed afterwards on a best-effort basis.
"""

from collections.abc import Iterable

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.filesystem.local_content_store import LocalContentStore
from imagehost.core.models.errors import ForbiddenError, ImageServiceError, NotFoundError
from imagehost.core.models.image import Asset
from imagehost.core.repositories.metadata_repository import AssetMetadataRepository
from imagehost.core.repositories.storage_repository import ContentStoreRepository
from imagehost.core.services.public_resolver import is_valid_image_id
from imagehost.core.utils.auth import Identity
from imagehost.core.utils.config import load_settings
from imagehost.core.utils.constants import ERROR_CODE_IMAGE_NOT_FOUND
from imagehost.core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DeleteService:
    """Application service responsible for deleting images.

    This service orchestrates:
    - Validation that the image exists and is not already deleted
    - Ownership check (admins may delete any image)
    - The conditional tombstone write
    - Removal of the blob from the content store
    """

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        content_store: ContentStoreRepository | None = None,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.storage = content_store or LocalContentStore(load_settings().storage_root)

    def delete_image(self, image_id: str, *, requester: Identity) -> Asset:
        """Delete an image.

        The deletion flow is:
        1. Fetch metadata to confirm the image exists and is live
        2. Check the requester owns the image or is an admin
        3. Commit the tombstone
        4. Remove the blob; a failure here is logged and never undone

        Returns:
            The tombstoned image record

        Raises:
            NotFoundError: If the image does not exist or is already deleted
            ForbiddenError: If the requester may not delete the image
            MetadataOperationFailedError: If the tombstone cannot be written
        """
        logger.debug("Starting image deletion", extra={"image_id": image_id})

        # Step 1: Existence
        asset = self.metadata.fetch_asset(image_id=image_id) if is_valid_image_id(image_id) else None
        if asset is None or asset.is_tombstoned:
            logger.warning("Image not found for delete", extra={"image_id": image_id})
            raise NotFoundError(message="Image not found", error_code=ERROR_CODE_IMAGE_NOT_FOUND)

        # Step 2: Ownership
        if asset.user_id != requester.user_id and not requester.is_admin:
            logger.warning(
                "Delete denied",
                extra={"image_id": image_id, "requester_id": requester.user_id},
            )
            raise ForbiddenError(
                message="You don't have permission to delete this image",
                details={"image_id": image_id},
            )

        # Step 3: Tombstone
        deleted = self.metadata.tombstone_asset(image_id=image_id, deleted_at=utc_now_iso())

        # Step 4: Blob removal
        try:
            self.storage.remove(deleted.storage_path)
        except Exception:
            logger.exception(
                "Failed to remove blob after tombstone",
                extra={"image_id": image_id, "storage_path": deleted.storage_path},
            )

        logger.info(
            "Image deleted successfully",
            extra={
                "image_id": image_id,
                "user_id": deleted.user_id,
                "requester_id": requester.user_id,
            },
        )
        return deleted

    def delete_images(self, image_ids: Iterable[str], *, requester: Identity) -> tuple[list[str], list[str]]:
        """Delete several images, skipping ids that are missing or not permitted.

        Returns:
            ``(deleted_ids, skipped_ids)``
        """
        deleted: list[str] = []
        skipped: list[str] = []

        for image_id in image_ids:
            try:
                self.delete_image(image_id, requester=requester)
            except (NotFoundError, ForbiddenError):
                skipped.append(image_id)
                continue
            except ImageServiceError:
                logger.exception("Batch delete item failed", extra={"image_id": image_id})
                skipped.append(image_id)
                continue

            deleted.append(image_id)

        logger.info(
            "Batch delete processed",
            extra={
                "requester_id": requester.user_id,
                "deleted": len(deleted),
                "skipped": len(skipped),
            },
        )
        return deleted, skipped
