"""Abstract contract for image file storage."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class ContentStoreRepository(ABC):
    """Contract for storing and retrieving image blobs.

    Implementations could be local disk, S3, GCS, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def put(self, stream: BinaryIO, extension: str) -> str:
        """Store a blob and return its relative storage path.

        Args:
            stream: Readable binary stream positioned at the start of the content
            extension: File extension without the leading dot

        Returns:
            Relative path for later retrieval, never derived from the public id

        Raises:
            StorageWriteFailedError: If the write fails
        """

    @abstractmethod
    def remove(self, relative_path: str) -> bool:
        """Delete a blob. Removing a missing blob is not an error.

        Returns:
            True if a file was removed, False if nothing was there

        Raises:
            StorageWriteFailedError: If deletion fails
        """

    @abstractmethod
    def resolve(self, relative_path: str) -> Path:
        """Return the absolute location of a stored blob.

        Raises:
            ValidationError: If the path escapes the storage root
        """

    @abstractmethod
    def open(self, relative_path: str) -> BinaryIO:
        """Open a stored blob for reading.

        Raises:
            NotFoundError: If the blob does not exist
        """
