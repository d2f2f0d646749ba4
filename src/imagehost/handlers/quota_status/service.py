"""Business logic for the caller's storage usage report."""

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.models.user import UsageStats
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    AssetStatsRepository,
    UserRepository,
)
from imagehost.core.services.quota_ledger import QuotaLedger, build_quota_status

logger = Logger(UTC=True)


class UsageService:
    """Quota status plus image count and total views for one owner."""

    def __init__(
        self,
        *,
        metadata: AssetMetadataRepository | None = None,
        stats: AssetStatsRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self.metadata = metadata or DynamoDBMetadata()
        self.stats = stats or DynamoDBAssetStats()
        self.quota = QuotaLedger(self.metadata, users or DynamoDBUsers())

    def usage(self, user_id: str) -> UsageStats:
        profile = self.quota.profile(user_id)
        assets = self.metadata.list_user_assets(user_id=user_id)

        used = sum(asset.file_size for asset in assets)
        views = self.stats.fetch_view_counts(image_ids=[asset.image_id for asset in assets])
        status = build_quota_status(used=used, quota=profile.storage_quota)

        logger.info(
            "Usage computed",
            extra={"user_id": user_id, "used": used, "images": len(assets)},
        )

        return UsageStats(
            **status.model_dump(),
            image_count=len(assets),
            total_views=sum(views.values()),
        )
