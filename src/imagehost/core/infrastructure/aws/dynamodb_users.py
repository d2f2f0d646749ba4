"""DynamoDB-backed implementation of UserRepository."""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from imagehost.core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from imagehost.core.infrastructure.aws.dynamodb_metadata import from_dynamodb
from imagehost.core.models.errors import DynamoDBError
from imagehost.core.models.user import UserProfile
from imagehost.core.repositories.metadata_repository import UserRepository
from imagehost.core.utils.constants import (
    ENV_USER_PROFILE_TABLE_NAME,
    ERROR_CODE_USER_FETCH_FAILED,
    ERROR_CODE_USER_UPDATE_FAILED,
)
from imagehost.core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DynamoDBUsers(UserRepository):
    """Owner profiles keyed by ``user_id``."""

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(
            table_env_var=ENV_USER_PROFILE_TABLE_NAME
        )

    def fetch_user(self, *, user_id: str) -> UserProfile | None:
        try:
            item = self._db.get_item(key={"user_id": user_id}).get("Item")
        except ClientError as exc:
            logger.error("DynamoDB user fetch failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to retrieve user profile",
                error_code=ERROR_CODE_USER_FETCH_FAILED,
                details={"user_id": user_id},
            ) from exc

        if item is None:
            return None

        return UserProfile.model_validate(from_dynamodb(item))

    def save_used_storage(self, *, user_id: str, used_storage: int) -> None:
        try:
            self._db.update_item(
                key={"user_id": user_id},
                UpdateExpression="SET #used = :used",
                ExpressionAttributeNames={"#used": "used_storage"},
                ExpressionAttributeValues={":used": used_storage},
            )
        except ClientError as exc:
            logger.error("DynamoDB used_storage update failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to update storage usage",
                error_code=ERROR_CODE_USER_UPDATE_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.info(
            "Cached storage usage updated",
            extra={"user_id": user_id, "used_storage": used_storage},
        )

    def update_settings(self, *, user_id: str, changes: dict[str, Any]) -> UserProfile:
        """Write preference changes, creating the profile row if needed."""
        names: dict[str, str] = {"#updated_at": "updated_at"}
        values: dict[str, Any] = {":updated_at": utc_now_iso()}
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

        try:
            response = self._db.update_item(
                key={"user_id": user_id},
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            logger.error("DynamoDB settings update failed", extra={"user_id": user_id})
            raise DynamoDBError(
                message="Unable to update user settings",
                error_code=ERROR_CODE_USER_UPDATE_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.info("User settings updated", extra={"user_id": user_id, "fields": sorted(changes)})
        return UserProfile.model_validate(from_dynamodb(response["Attributes"]))
