"""
Business logic for public image retrieval.

Wires the public resolver to the environment's repositories and reads the
resolved blob for the response.
"""

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats
from imagehost.core.infrastructure.filesystem.local_content_store import LocalContentStore
from imagehost.core.models.image import AssetView
from imagehost.core.services.public_resolver import PublicResolver
from imagehost.core.utils.config import load_settings

logger = Logger(UTC=True)


class GetService:
    """Application service responsible for serving images and metadata.

    Both operations go through the same visibility rule and both count
    as a view.
    """

    def __init__(self, resolver: PublicResolver | None = None) -> None:
        self.resolver = resolver or PublicResolver(
            metadata=DynamoDBMetadata(),
            stats=DynamoDBAssetStats(),
            content_store=LocalContentStore(load_settings().storage_root),
        )

    def get_metadata(self, image_id: str, *, requester_id: str | None) -> AssetView:
        return self.resolver.resolve(image_id, requester_id)

    def read_image(self, image_id: str, *, requester_id: str | None) -> tuple[bytes, str, AssetView]:
        """
        Resolve an image and read its bytes.

        Returns:
            Tuple of (content, mime_type, image metadata)

        Raises:
            NotFoundError: If the id is unknown, malformed or deleted
            ForbiddenError: If the image is private and not the caller's
        """
        served = self.resolver.serve(image_id, requester_id)

        with served.stream as stream:
            content = stream.read()

        logger.info(
            "Image served",
            extra={"image_id": image_id, "size": len(content), "views": served.image.view_count},
        )
        return content, served.mime_type, served.image
