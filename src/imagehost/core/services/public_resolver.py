"""Resolution of public image identifiers with visibility and view counting."""

import uuid
from typing import BinaryIO, NamedTuple

from aws_lambda_powertools import Logger

from imagehost.core.models.errors import ForbiddenError, NotFoundError
from imagehost.core.models.image import Asset, AssetView
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    AssetStatsRepository,
)
from imagehost.core.repositories.storage_repository import ContentStoreRepository
from imagehost.core.utils.constants import ERROR_CODE_IMAGE_NOT_FOUND

logger = Logger(UTC=True)


class ServedImage(NamedTuple):
    mime_type: str
    stream: BinaryIO
    image: AssetView


def is_valid_image_id(image_id: str | None) -> bool:
    if not image_id:
        return False
    try:
        return str(uuid.UUID(image_id)) == image_id.lower()
    except ValueError:
        return False


class PublicResolver:
    """Maps a public UUID to an image for metadata lookup or byte serving.

    Unknown, malformed and deleted identifiers all raise the same
    NotFoundError. A private image resolves only for its owner; everyone
    else, anonymous callers included, gets ForbiddenError. Metadata and
    bytes are gated by the same rule.

    Each successful resolution records one view.
    """

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository,
        stats: AssetStatsRepository,
        content_store: ContentStoreRepository,
    ) -> None:
        self._metadata = metadata
        self._stats = stats
        self._content_store = content_store

    def resolve(self, image_id: str, requester_id: str | None = None) -> AssetView:
        asset = self.load_visible(image_id, requester_id)
        view_count = self._stats.increment_view_count(image_id=asset.image_id)
        return asset.to_view(view_count=view_count)

    def serve(self, image_id: str, requester_id: str | None = None) -> ServedImage:
        asset = self.load_visible(image_id, requester_id)
        stream = self._content_store.open(asset.storage_path)

        try:
            view_count = self._stats.increment_view_count(image_id=asset.image_id)
        except BaseException:
            stream.close()
            raise

        return ServedImage(
            mime_type=asset.mime_type,
            stream=stream,
            image=asset.to_view(view_count=view_count),
        )

    def load_live(self, image_id: str) -> Asset:
        """Fetch a non-deleted image without visibility checks or view counting."""
        asset = self._metadata.fetch_asset(image_id=image_id) if is_valid_image_id(image_id) else None

        if asset is None or asset.is_tombstoned:
            logger.info("Image not resolvable", extra={"image_id": image_id})
            raise NotFoundError(message="Image not found", error_code=ERROR_CODE_IMAGE_NOT_FOUND)

        return asset

    def load_visible(self, image_id: str, requester_id: str | None) -> Asset:
        asset = self.load_live(image_id)

        if not asset.is_visible_to(requester_id):
            logger.info(
                "Private image requested by non-owner",
                extra={"image_id": image_id, "requester_id": requester_id},
            )
            raise ForbiddenError(
                message="You don't have permission to view this image",
                details={"image_id": image_id},
            )

        return asset
