"""Business logic for reading and editing an owner's preferences."""

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.models.errors import ValidationError
from imagehost.core.models.user import UserProfile, UserSettings
from imagehost.core.repositories.metadata_repository import UserRepository

from .models import SettingsPatch

logger = Logger(UTC=True)


class SettingsService:
    """Owner preferences: link domain and format, watermark and compression.

    Quota and role live on the same profile but are never writable here.
    """

    def __init__(self, users: UserRepository | None = None) -> None:
        self.users = users or DynamoDBUsers()

    def get_settings(self, user_id: str) -> UserSettings:
        profile = self.users.fetch_user(user_id=user_id) or UserProfile(user_id=user_id)
        return UserSettings.from_profile(profile)

    def update_settings(self, user_id: str, patch: SettingsPatch) -> UserSettings:
        """Apply ``patch`` to the owner's profile.

        Raises:
            ValidationError: If the patch carries no fields
        """
        if patch.is_empty:
            raise ValidationError(message="No settings to update")

        changes = patch.changes()
        profile = self.users.update_settings(user_id=user_id, changes=changes)

        logger.info("Settings saved", extra={"user_id": user_id, "fields": sorted(changes)})
        return UserSettings.from_profile(profile)
