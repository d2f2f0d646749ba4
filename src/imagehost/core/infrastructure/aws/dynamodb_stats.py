"""DynamoDB-backed implementation of AssetStatsRepository."""

from collections.abc import Iterable

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from imagehost.core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from imagehost.core.models.errors import DynamoDBError
from imagehost.core.repositories.metadata_repository import AssetStatsRepository
from imagehost.core.utils.constants import (
    BATCH_GET_MAX_KEYS,
    ENV_IMAGE_STATS_TABLE_NAME,
    ERROR_CODE_STATS_FETCH_FAILED,
    ERROR_CODE_STATS_UPDATE_FAILED,
)
from imagehost.core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DynamoDBAssetStats(AssetStatsRepository):
    """View counters kept in their own table, one row per image.

    Increments use ``ADD`` so concurrent viewers never overwrite each
    other's updates, and the first view creates the row.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(
            table_env_var=ENV_IMAGE_STATS_TABLE_NAME
        )

    def increment_view_count(self, *, image_id: str) -> int:
        try:
            response = self._db.update_item(
                key={"image_id": image_id},
                UpdateExpression="ADD #views :one SET #updated_at = :now",
                ExpressionAttributeNames={"#views": "view_count", "#updated_at": "updated_at"},
                ExpressionAttributeValues={":one": 1, ":now": utc_now_iso()},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as exc:
            logger.error("DynamoDB view count update failed", extra={"image_id": image_id})
            raise DynamoDBError(
                message="Unable to record image view",
                error_code=ERROR_CODE_STATS_UPDATE_FAILED,
                details={"image_id": image_id},
            ) from exc

        return int(response["Attributes"]["view_count"])

    def fetch_view_counts(self, *, image_ids: Iterable[str]) -> dict[str, int]:
        ids = list(dict.fromkeys(image_ids))
        counts = {image_id: 0 for image_id in ids}

        try:
            for start in range(0, len(ids), BATCH_GET_MAX_KEYS):
                chunk = ids[start : start + BATCH_GET_MAX_KEYS]
                items = self._db.batch_get_items(keys=[{"image_id": i} for i in chunk])
                for item in items:
                    counts[item["image_id"]] = int(item.get("view_count", 0))

        except ClientError as exc:
            logger.error("DynamoDB view count fetch failed", extra={"count": len(ids)})
            raise DynamoDBError(
                message="Unable to retrieve image statistics",
                error_code=ERROR_CODE_STATS_FETCH_FAILED,
            ) from exc

        return counts
