"""Local filesystem implementation of ContentStoreRepository."""

import os
import shutil
import uuid
from contextlib import suppress
from pathlib import Path
from typing import BinaryIO

from aws_lambda_powertools import Logger

from imagehost.core.models.errors import (
    NotFoundError,
    StorageWriteFailedError,
    ValidationError,
)
from imagehost.core.repositories.storage_repository import ContentStoreRepository
from imagehost.core.utils.constants import (
    DEFAULT_EXTENSION,
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_IMAGE_READ_FAILED,
    ERROR_CODE_INVALID_STORAGE_PATH,
)
from imagehost.core.utils.time import date_partition, utc_now

logger = Logger(UTC=True)


def _discard_partial(partial: Path) -> None:
    with suppress(OSError):
        partial.unlink(missing_ok=True)


class LocalContentStore(ContentStoreRepository):
    """Blob storage under a root directory, partitioned by UTC ingestion date.

    Files land at ``<root>/YYYY/MM/DD/<uuid4>.<ext>``. The generated name is
    unrelated to the image's public id, so public URLs reveal nothing about
    the layout on disk.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def put(self, stream: BinaryIO, extension: str) -> str:
        extension = (extension or DEFAULT_EXTENSION).lstrip(".").lower()
        relative_path = f"{date_partition(utc_now())}/{uuid.uuid4()}.{extension}"
        target = self.root / relative_path
        partial = target.with_name(f".{target.name}.partial")

        logger.debug("Writing blob", extra={"path": relative_path})

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with partial.open("wb") as fh:
                shutil.copyfileobj(stream, fh)
            os.replace(partial, target)

        except OSError as exc:
            logger.exception("Blob write failed", extra={"path": relative_path})
            _discard_partial(partial)
            raise StorageWriteFailedError(
                message="Unable to store image at this time",
                details={"path": relative_path, "reason": exc.strerror or str(exc)},
            ) from exc

        except BaseException:
            # cancelled mid-copy
            _discard_partial(partial)
            raise

        logger.info("Blob stored", extra={"path": relative_path})
        return relative_path

    def remove(self, relative_path: str) -> bool:
        target = self.resolve(relative_path)

        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("Blob already absent", extra={"path": relative_path})
            return False
        except OSError as exc:
            logger.error("Blob removal failed", extra={"path": relative_path})
            raise StorageWriteFailedError(
                message="Unable to remove stored image",
                details={"path": relative_path, "reason": exc.strerror or str(exc)},
            ) from exc

        logger.info("Blob removed", extra={"path": relative_path})
        return True

    def resolve(self, relative_path: str) -> Path:
        target = (self.root / relative_path).resolve()

        if not relative_path or not target.is_relative_to(self.root) or target == self.root:
            raise ValidationError(
                message="Invalid storage path",
                error_code=ERROR_CODE_INVALID_STORAGE_PATH,
                details={"path": relative_path},
            )

        return target

    def open(self, relative_path: str) -> BinaryIO:
        target = self.resolve(relative_path)

        try:
            return target.open("rb")
        except FileNotFoundError as exc:
            logger.error("Stored blob missing", extra={"path": relative_path})
            raise NotFoundError(
                message="Image not found",
                error_code=ERROR_CODE_IMAGE_NOT_FOUND,
            ) from exc
        except OSError as exc:
            logger.exception("Blob read failed", extra={"path": relative_path})
            raise StorageWriteFailedError(
                message="Unable to read stored image",
                error_code=ERROR_CODE_IMAGE_READ_FAILED,
            ) from exc
