"""Per-owner storage quota accounting."""

from collections.abc import Iterable

from aws_lambda_powertools import Logger

from imagehost.core.models.errors import QuotaExceededError
from imagehost.core.models.image import Asset
from imagehost.core.models.user import QuotaStatus, UserProfile
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    UserRepository,
)
from imagehost.core.utils.constants import UNLIMITED_REMAINING

logger = Logger(UTC=True)


class QuotaLedger:
    """Derived view of storage usage against each owner's quota.

    Usage is always recomputed from the owner's live asset records. The
    ``used_storage`` field on the profile is only a display cache that
    :meth:`reconcile` refreshes; no admission decision reads it.

    The usage query reads an eventually consistent index, so callers pass
    the assets they committed moments ago as ``recent``. Any of those the
    index does not list yet are added on top.
    """

    def __init__(self, metadata: AssetMetadataRepository, users: UserRepository) -> None:
        self._metadata = metadata
        self._users = users

    def profile(self, owner_id: str) -> UserProfile:
        """Stored profile, or the default profile for owners without one."""
        return self._users.fetch_user(user_id=owner_id) or UserProfile(user_id=owner_id)

    def used_storage(self, owner_id: str, recent: Iterable[Asset] = ()) -> int:
        sizes = dict(self._metadata.user_file_sizes(user_id=owner_id))
        for asset in recent:
            sizes.setdefault(asset.image_id, asset.file_size)
        return sum(sizes.values())

    def has_capacity(
        self, owner_id: str, additional_bytes: int, recent: Iterable[Asset] = ()
    ) -> bool:
        profile = self.profile(owner_id)
        if profile.has_unlimited_quota:
            return True
        return self.used_storage(owner_id, recent) + additional_bytes <= profile.storage_quota

    def check(self, owner_id: str, additional_bytes: int, recent: Iterable[Asset] = ()) -> None:
        """Raise QuotaExceededError if ``additional_bytes`` does not fit."""
        profile = self.profile(owner_id)
        if profile.has_unlimited_quota:
            return

        quota = profile.storage_quota

        used = self.used_storage(owner_id, recent)
        if used + additional_bytes > quota:
            logger.warning(
                "Storage quota exceeded",
                extra={
                    "user_id": owner_id,
                    "used": used,
                    "quota": quota,
                    "attempted": additional_bytes,
                },
            )
            raise QuotaExceededError(used=used, quota=quota, attempted=additional_bytes)

    def status(self, owner_id: str) -> QuotaStatus:
        quota = self.profile(owner_id).storage_quota
        used = self.used_storage(owner_id)
        return build_quota_status(used=used, quota=quota)

    def reconcile(self, owner_id: str) -> int:
        """Write the live usage sum into the owner's cached counter."""
        used = self.used_storage(owner_id)
        self._users.save_used_storage(user_id=owner_id, used_storage=used)
        logger.info("Storage usage reconciled", extra={"user_id": owner_id, "used": used})
        return used


def build_quota_status(*, used: int, quota: int) -> QuotaStatus:
    if quota == 0:
        return QuotaStatus(used=used, quota=0, remaining=UNLIMITED_REMAINING, percent=0.0)

    return QuotaStatus(
        used=used,
        quota=quota,
        remaining=max(quota - used, 0),
        percent=round(used / quota * 100, 2),
    )
