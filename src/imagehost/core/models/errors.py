"""Custom exception classes for the image service."""

from typing import Any

from imagehost.core.utils.constants import (
    ERROR_CODE_DYNAMODB,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_FORBIDDEN,
    ERROR_CODE_INVALID_FILTER,
    ERROR_CODE_METADATA_OPERATION_FAILED,
    ERROR_CODE_QUOTA_EXCEEDED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE_WRITE_FAILED,
    ERROR_CODE_UNAUTHORIZED,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
)


class ImageServiceError(Exception):
    """
    Base exception for all image service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used in per-item failure reports."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ImageServiceError):
    """Raised when request validation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class FileSizeError(ValidationError):
    """Raised when file size exceeds the allowed limit."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_FILE_SIZE_EXCEEDED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class MIMETypeError(ValidationError):
    """Raised when an unsupported MIME type is provided."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_UNSUPPORTED_MIME_TYPE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class FilterError(ValidationError):
    """Raised when filter parameters are invalid."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_INVALID_FILTER,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class QuotaExceededError(ImageServiceError):
    """Raised when an upload would push the owner past their storage quota.

    The numbers are kept as attributes so callers can show the owner how
    much space is left.
    """

    used: int
    quota: int
    remaining: int
    attempted: int

    def __init__(
        self,
        *,
        used: int,
        quota: int,
        attempted: int,
        message: str = "Storage quota exceeded",
        error_code: str = ERROR_CODE_QUOTA_EXCEEDED,
    ) -> None:
        self.used = used
        self.quota = quota
        self.remaining = max(quota - used, 0)
        self.attempted = attempted

        super().__init__(
            message=message,
            error_code=error_code,
            details={
                "used": used,
                "quota": quota,
                "remaining": self.remaining,
                "attempted": attempted,
            },
        )


class NotFoundError(ImageServiceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_RESOURCE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ForbiddenError(ImageServiceError):
    """Raised when the caller may not access a resource."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_FORBIDDEN,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UnauthorizedError(ImageServiceError):
    """Raised when a request carries no authenticated identity."""

    def __init__(
        self,
        *,
        message: str = "Authentication required",
        error_code: str = ERROR_CODE_UNAUTHORIZED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class StorageWriteFailedError(ImageServiceError):
    """Raised when image bytes cannot be written to the content store."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_STORAGE_WRITE_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class MetadataOperationFailedError(ImageServiceError):
    """Raised when an image metadata operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_METADATA_OPERATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class DynamoDBError(MetadataOperationFailedError):
    """Raised when a DynamoDB operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_DYNAMODB,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )
