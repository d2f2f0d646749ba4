"""Business logic for image upload operations.

This module coordinates validation, hashing, deduplication, quota
enforcement, storage and metadata persistence for a batch of uploads
while translating failures into domain-specific errors.
"""

import hashlib
import threading
import uuid
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import PurePath
from tempfile import SpooledTemporaryFile
from typing import IO, Any

from aws_lambda_powertools import Logger

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from imagehost.core.infrastructure.filesystem.local_content_store import LocalContentStore
from imagehost.core.models.errors import (
    FileSizeError,
    ImageServiceError,
    MetadataOperationFailedError,
    MIMETypeError,
    ValidationError,
)
from imagehost.core.models.image import Asset
from imagehost.core.models.upload import UploadFailure, UploadItem, UploadResult
from imagehost.core.repositories.metadata_repository import (
    AssetMetadataRepository,
    UserRepository,
)
from imagehost.core.repositories.storage_repository import ContentStoreRepository
from imagehost.core.services.dimension_probe import probe_dimensions
from imagehost.core.services.hash_index import HashIndex
from imagehost.core.services.quota_ledger import QuotaLedger
from imagehost.core.utils.config import UploadSettings, load_settings
from imagehost.core.utils.constants import (
    DEFAULT_EXTENSION,
    ERROR_CODE_EMPTY_FILE,
    ERROR_CODE_INTERNAL_ERROR,
    ERROR_CODE_INVALID_FILENAME,
    ERROR_CODE_METADATA_CREATE_FAILED,
    ERROR_CODE_SIZE_MISMATCH,
    HASH_CHUNK_SIZE,
    MAX_FILENAME_LENGTH,
    MIME_TYPE_EXTENSION_MAP,
    SPOOL_MAX_MEMORY,
    format_file_size,
)
from imagehost.core.utils.time import utc_now_iso

logger = Logger(UTC=True)

DimensionProbe = Callable[[IO[bytes]], tuple[int, int]]


class OwnerLocks:
    """One lock per owner, created on first use.

    Serializes the dedup/quota/commit section of concurrent uploads by the
    same owner within this process. Other processes can still race; the
    quota stays a best-effort admission guard.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def for_owner(self, owner_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(owner_id, threading.Lock())


class UploadService:
    """Application service responsible for image uploads.

    This service orchestrates, for every item of a batch and in order:
    - Filename, size and MIME type validation
    - Streaming the content through SHA-256 while spooling it
    - Per-owner duplicate detection
    - Quota enforcement against current live usage
    - Writing the blob to the content store
    - Persisting image metadata, removing the blob if that fails

    A failing item is reported in the result and never stops later items.
    """

    owner_locks = OwnerLocks()

    def __init__(
        self,
        *,
        settings: UploadSettings | None = None,
        metadata: AssetMetadataRepository | None = None,
        users: UserRepository | None = None,
        content_store: ContentStoreRepository | None = None,
        dimension_probe: DimensionProbe = probe_dimensions,
    ) -> None:
        """Initialize the upload service with its infrastructure dependencies."""
        self.settings = settings or load_settings()
        self.metadata = metadata or DynamoDBMetadata()
        self.storage = content_store or LocalContentStore(self.settings.storage_root)
        self.hash_index = HashIndex(self.metadata)
        self.quota = QuotaLedger(self.metadata, users or DynamoDBUsers())
        self.dimension_probe = dimension_probe

    @staticmethod
    def generate_image_id() -> str:
        """Generate a public image identifier."""
        return str(uuid.uuid4())

    def upload_batch(self, *, user_id: str, items: Iterable[UploadItem]) -> UploadResult:
        """Process a batch of uploads for one owner.

        Returns:
            Created and deduplicated images plus one failure entry per
            rejected item. A batch in which every item failed is still a
            normal result.
        """
        result = UploadResult()
        committed: list[Asset] = []

        for item in items:
            try:
                asset, created = self.upload_image(user_id=user_id, item=item, recent=committed)

            except ImageServiceError as exc:
                logger.warning(
                    "Upload item rejected",
                    extra={
                        "user_id": user_id,
                        "image_name": item.filename,
                        "error_code": exc.error_code,
                    },
                )
                result.errors.append(UploadFailure(filename=item.filename, **exc.to_dict()))
                continue

            except Exception:
                logger.exception(
                    "Unexpected error uploading item",
                    extra={"user_id": user_id, "image_name": item.filename},
                )
                result.errors.append(
                    UploadFailure(
                        filename=item.filename,
                        error=ERROR_CODE_INTERNAL_ERROR,
                        message="Unable to upload image",
                    )
                )
                continue

            if created:
                committed.append(asset)
                result.created.append(asset.to_view())
            else:
                result.deduped.append(asset.to_view())

        logger.info(
            "Upload batch processed",
            extra={
                "user_id": user_id,
                "created_count": len(result.created),
                "deduped_count": len(result.deduped),
                "failed_count": len(result.errors),
            },
        )
        return result

    def upload_image(
        self,
        *,
        user_id: str,
        item: UploadItem,
        recent: Sequence[Asset] = (),
    ) -> tuple[Asset, bool]:
        """Upload a single image and persist its metadata.

        ``recent`` holds assets this caller committed moments ago. They are
        matched for dedup and counted against the quota even before the
        table's indexes list them.

        The upload flow is:
        1. Validate filename, declared size and MIME type
        2. Hash the content while spooling it
        3. Return the owner's existing image for identical content
        4. Check the owner's quota
        5. Write the blob to the content store
        6. Persist image metadata (remove the blob if this fails)

        Returns:
            ``(asset, created)`` where ``created`` is False for a dedup hit

        Raises:
            ValidationError: If name, size, type or content are not acceptable
            QuotaExceededError: If the image does not fit the owner's quota
            StorageWriteFailedError: If the blob cannot be written
            MetadataOperationFailedError: If metadata persistence fails
        """
        logger.debug(
            "Starting image upload",
            extra={"user_id": user_id, "image_name": item.filename},
        )

        # Step 1: Validate filename, declared size and MIME type
        mime_type = self._validate(item)

        # Step 2: Hash while spooling
        with self._spool(item.open_stream(), item.declared_size) as (spool, file_hash, size):
            with self.owner_locks.for_owner(user_id):
                # Step 3: Per-owner duplicate detection
                existing = self.hash_index.find_by_hash(file_hash, user_id, recent)
                if existing is not None:
                    return existing, False

                # Step 4: Quota against current live usage
                self.quota.check(user_id, size, recent)

                # Step 5: Write the blob
                storage_path = self.storage.put(spool, self._extension_for(mime_type, item.filename))

                # Step 6: Persist metadata, with blob removal as compensation
                try:
                    spool.seek(0)
                    width, height = self.dimension_probe(spool)
                    asset = Asset(
                        image_id=self.generate_image_id(),
                        user_id=user_id,
                        file_hash=file_hash,
                        storage_path=storage_path,
                        original_name=item.filename,
                        file_size=size,
                        mime_type=mime_type,
                        width=width,
                        height=height,
                        is_public=True,
                        created_at=utc_now_iso(),
                    )
                    self.metadata.create_asset(asset=asset)

                except Exception as exc:
                    logger.exception(
                        "Failed to persist image metadata",
                        extra={"user_id": user_id, "storage_path": storage_path},
                    )
                    self._discard_blob(storage_path)

                    if isinstance(exc, ImageServiceError):
                        raise

                    raise MetadataOperationFailedError(
                        message="Unable to save image metadata",
                        error_code=ERROR_CODE_METADATA_CREATE_FAILED,
                        details={"image_name": item.filename},
                    ) from exc

                except BaseException:
                    self._discard_blob(storage_path)
                    raise

        logger.info(
            "Image uploaded successfully",
            extra={"image_id": asset.image_id, "user_id": user_id},
        )
        return asset, True

    def _validate(self, item: UploadItem) -> str:
        """Check filename, declared size and MIME type; return the normalized MIME type."""
        filename = item.filename.strip()
        if not filename or len(filename) > MAX_FILENAME_LENGTH:
            raise ValidationError(
                message=f"Filename must be between 1 and {MAX_FILENAME_LENGTH} characters",
                error_code=ERROR_CODE_INVALID_FILENAME,
                details={"length": len(filename)},
            )

        max_size = self.settings.max_upload_size

        if item.declared_size is not None and item.declared_size > max_size:
            raise FileSizeError(
                message=f"File size exceeds {format_file_size(max_size)} limit",
                details={"size": item.declared_size, "max_size": max_size},
            )

        mime_type = item.mime_type.split(";")[0].strip().lower()
        if mime_type not in self.settings.allowed_mime_types:
            raise MIMETypeError(
                message="Unsupported image type",
                details={
                    "mime_type": item.mime_type,
                    "allowed": sorted(self.settings.allowed_mime_types),
                },
            )

        return mime_type

    @contextmanager
    def _spool(
        self, stream: IO[bytes], declared_size: int | None
    ) -> Iterator[tuple[Any, str, int]]:
        """Copy ``stream`` into a spool file, hashing as it goes.

        Yields ``(spool, sha256_hex, size)`` with the spool rewound. A
        ``declared_size`` of None accepts whatever length arrives.
        """
        max_size = self.settings.max_upload_size
        hasher = hashlib.sha256()
        size = 0

        with SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY) as spool:
            while chunk := stream.read(HASH_CHUNK_SIZE):
                size += len(chunk)
                if size > max_size:
                    raise FileSizeError(
                        message=f"File size exceeds {format_file_size(max_size)} limit",
                        details={"max_size": max_size},
                    )
                hasher.update(chunk)
                spool.write(chunk)

            if size == 0:
                raise ValidationError(
                    message="File is empty",
                    error_code=ERROR_CODE_EMPTY_FILE,
                )

            if declared_size is not None and size != declared_size:
                raise ValidationError(
                    message="File size does not match the declared size",
                    error_code=ERROR_CODE_SIZE_MISMATCH,
                    details={"declared": declared_size, "received": size},
                )

            spool.seek(0)
            yield spool, hasher.hexdigest(), size

    @staticmethod
    def _extension_for(mime_type: str, filename: str) -> str:
        extensions = MIME_TYPE_EXTENSION_MAP.get(mime_type)
        if extensions:
            return extensions[0]

        suffix = PurePath(filename).suffix.lstrip(".").lower()
        return suffix or DEFAULT_EXTENSION

    def _discard_blob(self, storage_path: str) -> None:
        """Best-effort cleanup to avoid orphaned blobs."""
        try:
            self.storage.remove(storage_path)
        except Exception:
            logger.warning(
                "Failed to clean up stored image after metadata failure",
                extra={"storage_path": storage_path},
            )
