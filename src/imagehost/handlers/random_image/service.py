"""
Business logic for the random public image endpoints.

Candidates are the live public images matching the optional owner and tag
filters. The chosen image goes through the public resolver, so every
mode counts one view.
"""

import random
from collections.abc import Callable, Mapping, Sequence

from aws_lambda_powertools import Logger

from imagehost.core.filters.keyword_filter import KeywordFilter
from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.infrastructure.filesystem.local_content_store import LocalContentStore
from imagehost.core.models.errors import NotFoundError
from imagehost.core.models.image import Asset, AssetView
from imagehost.core.models.user import UserProfile
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    UserRepository,
)
from imagehost.core.services.link_formatter import format_links, resolve_base_url
from imagehost.core.services.public_resolver import PublicResolver
from imagehost.core.utils.config import load_settings
from imagehost.core.utils.constants import ERROR_CODE_IMAGE_NOT_FOUND

from .models import RandomImageRequest

logger = Logger(UTC=True)

Chooser = Callable[[Sequence[Asset]], Asset]


class RandomImageService:
    """Picks one public image at random and presents it."""

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        users: UserRepository | None = None,
        resolver: PublicResolver | None = None,
        chooser: Chooser = random.choice,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.users = users or DynamoDBUsers()
        self.resolver = resolver or PublicResolver(
            metadata=self.metadata,
            stats=DynamoDBAssetStats(),
            content_store=LocalContentStore(load_settings().storage_root),
        )
        self.chooser = chooser

    def pick(self, request: RandomImageRequest) -> Asset:
        """Choose one live public image matching the request's filters.

        Raises:
            NotFoundError: If no image matches
        """
        candidates = [
            asset
            for asset in self.metadata.list_public_assets(user_id=request.user_id)
            if KeywordFilter.matches_tag(asset, request.tags)
        ]

        if not candidates:
            logger.info(
                "No random image candidates",
                extra={"user_id": request.user_id, "tags": request.tags},
            )
            raise NotFoundError(
                message="No images match the given filters",
                error_code=ERROR_CODE_IMAGE_NOT_FOUND,
            )

        return self.chooser(candidates)

    def random_metadata(self, request: RandomImageRequest) -> AssetView:
        return self.resolver.resolve(self.pick(request).image_id)

    def random_content(self, request: RandomImageRequest) -> tuple[bytes, str, AssetView]:
        """Pick an image and read its bytes.

        Returns:
            Tuple of (content, mime_type, image metadata)
        """
        served = self.resolver.serve(self.pick(request).image_id)

        with served.stream as stream:
            content = stream.read()

        return content, served.mime_type, served.image

    def random_location(
        self, request: RandomImageRequest, headers: Mapping[str, str] | None
    ) -> str:
        """Public URL of a random image, on its owner's custom domain when set."""
        asset = self.pick(request)
        self.resolver.resolve(asset.image_id)

        profile = self.users.fetch_user(user_id=asset.user_id) or UserProfile(user_id=asset.user_id)
        return format_links(asset, resolve_base_url(profile, headers)).url
