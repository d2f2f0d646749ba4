"""Business logic for embed-link generation."""

from collections.abc import Mapping

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.models.errors import ForbiddenError, NotFoundError
from imagehost.core.models.image import ImageLinks
from imagehost.core.models.user import UserProfile
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    UserRepository,
)
from imagehost.core.services.link_formatter import format_links, resolve_base_url
from imagehost.core.services.public_resolver import is_valid_image_id
from imagehost.core.utils.constants import ERROR_CODE_IMAGE_NOT_FOUND


class LinkService:
    """Builds share links for the caller's own images.

    Links use the owner's custom domain when one is configured, otherwise
    the host the request came in on.
    """

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.users = users or DynamoDBUsers()

    def links_for(
        self,
        image_id: str,
        *,
        requester_id: str,
        headers: Mapping[str, str] | None,
    ) -> ImageLinks:
        asset = self.metadata.fetch_asset(image_id=image_id) if is_valid_image_id(image_id) else None
        if asset is None or asset.is_tombstoned:
            raise NotFoundError(message="Image not found", error_code=ERROR_CODE_IMAGE_NOT_FOUND)

        if asset.user_id != requester_id:
            raise ForbiddenError(
                message="You don't have permission to share this image",
                details={"image_id": image_id},
            )

        profile = self.users.fetch_user(user_id=requester_id) or UserProfile(user_id=requester_id)
        links = format_links(asset, resolve_base_url(profile, headers))
        return links.model_copy(update={"default_format": profile.default_link_format})
