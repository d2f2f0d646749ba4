"""Content-hash lookup used for per-owner deduplication."""

from collections.abc import Iterable

from aws_lambda_powertools import Logger

from imagehost.core.models.image import Asset
from imagehost.core.repositories.metadata_repository import AssetMetadataRepository

logger = Logger(UTC=True)


class HashIndex:
    """Maps ``(content hash, owner)`` to the owner's existing live asset.

    Dedup is scoped per owner: identical bytes from two owners are two
    assets, each charged to its own quota.

    The hash index in the table is eventually consistent. Assets written
    moments ago can be passed as ``recent`` and are matched first.
    """

    def __init__(self, metadata: AssetMetadataRepository) -> None:
        self._metadata = metadata

    def find_by_hash(
        self, file_hash: str, owner_id: str, recent: Iterable[Asset] = ()
    ) -> Asset | None:
        asset = next(
            (
                candidate
                for candidate in recent
                if candidate.file_hash == file_hash and candidate.user_id == owner_id
            ),
            None,
        )
        if asset is None:
            asset = self._metadata.find_by_hash(user_id=owner_id, file_hash=file_hash)

        if asset is not None:
            logger.info(
                "Duplicate content for owner",
                extra={"user_id": owner_id, "image_id": asset.image_id},
            )

        return asset
