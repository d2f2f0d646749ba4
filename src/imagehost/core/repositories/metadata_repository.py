"""Abstract contracts for image metadata, statistics and owner persistence."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from imagehost.core.models.image import Asset
from imagehost.core.models.user import UserProfile


class AssetMetadataRepository(ABC):
    """Contract for storing and retrieving image metadata.

    Implementations could be DynamoDB, PostgreSQL, MongoDB, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def create_asset(self, *, asset: Asset) -> None:
        """Persist a new asset in a single atomic write.

        Raises:
            MetadataOperationFailedError: If the id already exists or the write fails
        """

    @abstractmethod
    def fetch_asset(self, *, image_id: str) -> Asset | None:
        """Fetch an asset by public id, tombstoned or not.

        Raises:
            DynamoDBError: If fetch fails
        """

    @abstractmethod
    def update_asset(self, *, image_id: str, changes: dict[str, Any], updated_at: str) -> Asset:
        """Apply a partial update to a live asset and return the new state.

        Raises:
            NotFoundError: If the asset is missing or tombstoned
            DynamoDBError: If the update fails
        """

    @abstractmethod
    def tombstone_asset(self, *, image_id: str, deleted_at: str) -> Asset:
        """Mark a live asset as deleted and return its final state.

        Raises:
            NotFoundError: If the asset is missing or already tombstoned
            DynamoDBError: If the update fails
        """

    @abstractmethod
    def find_by_hash(self, *, user_id: str, file_hash: str) -> Asset | None:
        """Return the owner's live asset with this content hash, if any.

        Raises:
            DynamoDBError: If the lookup fails
        """

    @abstractmethod
    def list_user_assets(self, *, user_id: str) -> list[Asset]:
        """List all live assets of an owner, newest first.

        Raises:
            DynamoDBError: If query fails
        """

    @abstractmethod
    def list_public_assets(self, *, user_id: str | None = None) -> list[Asset]:
        """List live public assets, of one owner when ``user_id`` is given.

        Raises:
            DynamoDBError: If the query or scan fails
        """

    @abstractmethod
    def user_file_sizes(self, *, user_id: str) -> dict[str, int]:
        """Map each of the owner's live image ids to its ``file_size``.

        Raises:
            DynamoDBError: If query fails
        """

    def sum_user_file_sizes(self, *, user_id: str) -> tuple[int, int]:
        """Return ``(total_bytes, asset_count)`` over the owner's live assets."""
        sizes = self.user_file_sizes(user_id=user_id)
        return sum(sizes.values()), len(sizes)


class AssetStatsRepository(ABC):
    """Contract for per-image access statistics."""

    @abstractmethod
    def increment_view_count(self, *, image_id: str) -> int:
        """Atomically add one view, creating the row if absent; return the new count."""

    @abstractmethod
    def fetch_view_counts(self, *, image_ids: Iterable[str]) -> dict[str, int]:
        """Return view counts for the given ids; ids never viewed map to 0."""


class UserRepository(ABC):
    """Contract for quota owner profiles."""

    @abstractmethod
    def fetch_user(self, *, user_id: str) -> UserProfile | None:
        """Fetch a stored profile, or None when the owner has none."""

    @abstractmethod
    def save_used_storage(self, *, user_id: str, used_storage: int) -> None:
        """Overwrite the cached usage figure for an owner."""

    @abstractmethod
    def update_settings(self, *, user_id: str, changes: dict[str, Any]) -> UserProfile:
        """Apply owner preference changes and return the stored profile.

        A ``None`` value removes the attribute. Owners without a stored
        profile get one created.

        Raises:
            DynamoDBError: If the update fails
        """
