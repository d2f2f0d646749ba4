"""DynamoDB-backed implementation of AssetMetadataRepository."""

from decimal import Decimal
from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from imagehost.core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from imagehost.core.models.errors import (
    DynamoDBError,
    ImageServiceError,
    MetadataOperationFailedError,
    NotFoundError,
)
from imagehost.core.models.image import Asset
from imagehost.core.repositories.metadata_repository import AssetMetadataRepository
from imagehost.core.utils.constants import (
    ENV_IMAGE_METADATA_TABLE_NAME,
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_METADATA_CREATE_FAILED,
    ERROR_CODE_METADATA_DUPLICATE_CHECK_FAILED,
    ERROR_CODE_METADATA_FETCH_FAILED,
    ERROR_CODE_METADATA_LIST_FAILED,
    ERROR_CODE_METADATA_UPDATE_FAILED,
    USER_CREATED_INDEX,
    USER_FILEHASH_INDEX,
)

Item = dict[str, Any]

logger = Logger(UTC=True)

LIVE_ASSET_CONDITION = "attribute_exists(image_id) AND attribute_not_exists(deleted_at)"


def from_dynamodb(item: Item) -> Item:
    """Convert DynamoDB number values (Decimal) back to ints."""
    return {
        key: int(value) if isinstance(value, Decimal) else value
        for key, value in item.items()
    }


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DynamoDBMetadata(AssetMetadataRepository):
    """DynamoDB-backed metadata storage with error handling.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.

    Deleted assets stay in the table with ``deleted_at`` set; every read
    path except :meth:`fetch_asset` skips them.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        """Initialize with DynamoDB adapter."""
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(
            table_env_var=ENV_IMAGE_METADATA_TABLE_NAME
        )

    def create_asset(self, *, asset: Asset) -> None:
        """Create metadata for an image.

        Raises:
            MetadataOperationFailedError: If the image id already exists
            DynamoDBError: If creation fails
        """
        log_extra = {"image_id": asset.image_id, "user_id": asset.user_id}
        logger.debug("Creating asset metadata", extra=log_extra)

        try:
            self._db.put_item(
                item=asset.to_item(),
                condition_expression="attribute_not_exists(image_id)",  # Partition key
            )
            logger.info("Asset metadata created", extra=log_extra)

        except ClientError as exc:
            logger.error("DynamoDB put_item failed", extra=log_extra)

            if _is_conditional_failure(exc):
                raise MetadataOperationFailedError(
                    message="Image identifier already in use",
                    error_code=ERROR_CODE_METADATA_CREATE_FAILED,
                    details={"image_id": asset.image_id},
                ) from exc

            raise DynamoDBError(
                message="Unable to save image metadata at this time",
                error_code=ERROR_CODE_METADATA_CREATE_FAILED,
                details={"image_id": asset.image_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error creating asset metadata")
            raise DynamoDBError(
                message="Unable to save image metadata at this time",
                error_code=ERROR_CODE_METADATA_CREATE_FAILED,
                details={"image_id": asset.image_id},
            ) from exc

    def fetch_asset(self, *, image_id: str) -> Asset | None:
        """Fetch metadata for a single image.

        Raises:
            DynamoDBError: If fetch fails
        """
        logger.debug("Fetching asset metadata", extra={"image_id": image_id})

        try:
            response = self._db.get_item(key={"image_id": image_id})
            item = response.get("Item")

            if item is None:
                return None

            return Asset.model_validate(from_dynamodb(item))

        except ClientError as exc:
            logger.error("DynamoDB get_item failed", extra={"image_id": image_id})
            raise DynamoDBError(
                message="Unable to retrieve image metadata",
                error_code=ERROR_CODE_METADATA_FETCH_FAILED,
                details={"image_id": image_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error fetching asset metadata")
            raise DynamoDBError(
                message="Unable to retrieve image metadata",
                error_code=ERROR_CODE_METADATA_FETCH_FAILED,
                details={"image_id": image_id},
            ) from exc

    def update_asset(self, *, image_id: str, changes: dict[str, Any], updated_at: str) -> Asset:
        """Apply a partial update; ``None`` values remove the attribute."""
        logger.debug(
            "Updating asset metadata",
            extra={"image_id": image_id, "fields": sorted(changes)},
        )

        names: dict[str, str] = {"#updated_at": "updated_at"}
        values: dict[str, Any] = {":updated_at": updated_at}
        set_clauses = ["#updated_at = :updated_at"]
        remove_clauses: list[str] = []

        for index, (field, value) in enumerate(sorted(changes.items())):
            name = f"#f{index}"
            names[name] = field
            if value is None:
                remove_clauses.append(name)
            else:
                values[f":v{index}"] = value
                set_clauses.append(f"{name} = :v{index}")

        expression = "SET " + ", ".join(set_clauses)
        if remove_clauses:
            expression += " REMOVE " + ", ".join(remove_clauses)

        return self._conditional_update(
            image_id=image_id,
            update_expression=expression,
            names=names,
            values=values,
            error_message="Unable to update image metadata",
        )

    def tombstone_asset(self, *, image_id: str, deleted_at: str) -> Asset:
        """Mark an image as deleted. A tombstone is never cleared."""
        logger.debug("Tombstoning asset", extra={"image_id": image_id})

        asset = self._conditional_update(
            image_id=image_id,
            update_expression="SET #deleted_at = :deleted_at, #updated_at = :deleted_at",
            names={"#deleted_at": "deleted_at", "#updated_at": "updated_at"},
            values={":deleted_at": deleted_at},
            error_message="Unable to delete image metadata",
        )

        logger.info("Asset tombstoned", extra={"image_id": image_id})
        return asset

    def find_by_hash(self, *, user_id: str, file_hash: str) -> Asset | None:
        """Return the owner's live asset with this content hash.

        BEHAVIOR ON ERROR:
        - If the check fails, an exception is raised (fail-closed approach)
        - This prevents silent duplicate uploads if DynamoDB is unavailable
        """
        logger.debug(
            "Checking for duplicate",
            extra={"user_id": user_id, "file_hash": file_hash},
        )

        try:
            items = self._query_all(
                IndexName=USER_FILEHASH_INDEX,
                KeyConditionExpression=(
                    Key("user_id").eq(user_id) & Key("file_hash").eq(file_hash)
                ),
                FilterExpression=Attr("deleted_at").not_exists(),
            )
        except ClientError as exc:
            logger.error("DynamoDB duplicate check failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to verify duplicate image",
                error_code=ERROR_CODE_METADATA_DUPLICATE_CHECK_FAILED,
                details={"user_id": user_id},
            ) from exc

        if not items:
            return None

        logger.debug(
            "Duplicate found",
            extra={"user_id": user_id, "image_id": items[0].get("image_id")},
        )
        return Asset.model_validate(from_dynamodb(items[0]))

    def list_user_assets(self, *, user_id: str) -> list[Asset]:
        """List an owner's live images, newest first."""
        logger.debug("Listing user assets", extra={"user_id": user_id})

        try:
            items = self._query_all(
                IndexName=USER_CREATED_INDEX,
                KeyConditionExpression=Key("user_id").eq(user_id),
                FilterExpression=Attr("deleted_at").not_exists(),
                ScanIndexForward=False,
            )
        except ClientError as exc:
            logger.error("DynamoDB query failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to list images for this user",
                error_code=ERROR_CODE_METADATA_LIST_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.info("User assets listed", extra={"user_id": user_id, "count": len(items)})
        return [Asset.model_validate(from_dynamodb(item)) for item in items]

    def list_public_assets(self, *, user_id: str | None = None) -> list[Asset]:
        """Live public images, optionally of one owner.

        Without an owner the whole table is scanned; this backs the random
        image endpoints and is not meant for large catalogs.
        """
        live_public = Attr("deleted_at").not_exists() & Attr("is_public").eq(True)

        try:
            if user_id:
                items = self._query_all(
                    IndexName=USER_CREATED_INDEX,
                    KeyConditionExpression=Key("user_id").eq(user_id),
                    FilterExpression=live_public,
                )
            else:
                items = self._scan_all(FilterExpression=live_public)
        except ClientError as exc:
            logger.error("DynamoDB public listing failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to list public images",
                error_code=ERROR_CODE_METADATA_LIST_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.debug("Public assets listed", extra={"user_id": user_id, "count": len(items)})
        return [Asset.model_validate(from_dynamodb(item)) for item in items]

    def user_file_sizes(self, *, user_id: str) -> dict[str, int]:
        """Map the owner's live image ids to their ``file_size``.

        Only the attributes needed are projected; tombstones are skipped
        client side.
        """
        try:
            items = self._query_all(
                IndexName=USER_CREATED_INDEX,
                KeyConditionExpression=Key("user_id").eq(user_id),
                ProjectionExpression="#id, #size, #deleted",
                ExpressionAttributeNames={
                    "#id": "image_id",
                    "#size": "file_size",
                    "#deleted": "deleted_at",
                },
            )
        except ClientError as exc:
            logger.error("DynamoDB usage query failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to compute storage usage",
                error_code=ERROR_CODE_METADATA_LIST_FAILED,
                details={"user_id": user_id},
            ) from exc

        return {
            item["image_id"]: int(item.get("file_size", 0))
            for item in items
            if item.get("deleted_at") is None
        }

    def _conditional_update(
        self,
        *,
        image_id: str,
        update_expression: str,
        names: dict[str, str],
        values: dict[str, Any],
        error_message: str,
    ) -> Asset:
        try:
            response = self._db.update_item(
                key={"image_id": image_id},
                UpdateExpression=update_expression,
                ConditionExpression=LIVE_ASSET_CONDITION,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
            return Asset.model_validate(from_dynamodb(response["Attributes"]))

        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"image_id": image_id},
                ) from exc

            logger.error("DynamoDB update_item failed", extra={"image_id": image_id})
            raise DynamoDBError(
                message=error_message,
                error_code=ERROR_CODE_METADATA_UPDATE_FAILED,
                details={"image_id": image_id},
            ) from exc

        except ImageServiceError:
            raise

        except Exception as exc:
            logger.exception("Unexpected error updating asset metadata")
            raise DynamoDBError(
                message=error_message,
                error_code=ERROR_CODE_METADATA_UPDATE_FAILED,
                details={"image_id": image_id},
            ) from exc

    def _query_all(self, **query_kwargs: Any) -> list[Item]:
        """Run a query to exhaustion, following ``LastEvaluatedKey``."""
        items: list[Item] = []
        last_evaluated_key: dict[str, Any] | None = None

        while True:
            if last_evaluated_key:
                query_kwargs["ExclusiveStartKey"] = last_evaluated_key

            response = self._db.query(**query_kwargs)
            items.extend(response.get("Items", []))

            last_evaluated_key = response.get("LastEvaluatedKey")
            if not last_evaluated_key:
                return items

    def _scan_all(self, **scan_kwargs: Any) -> list[Item]:
        """Run a scan to exhaustion, following ``LastEvaluatedKey``."""
        items: list[Item] = []
        last_evaluated_key: dict[str, Any] | None = None

        while True:
            if last_evaluated_key:
                scan_kwargs["ExclusiveStartKey"] = last_evaluated_key

            response = self._db.scan(**scan_kwargs)
            items.extend(response.get("Items", []))

            last_evaluated_key = response.get("LastEvaluatedKey")
            if not last_evaluated_key:
                return items
