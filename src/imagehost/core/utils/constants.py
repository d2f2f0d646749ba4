"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_FILTER = "INVALID_FILTER"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_EMPTY_FILE = "EMPTY_FILE"
ERROR_CODE_SIZE_MISMATCH = "SIZE_MISMATCH"
ERROR_CODE_INVALID_FILENAME = "INVALID_FILENAME"
ERROR_CODE_INVALID_FILE_ENCODING = "INVALID_FILE_ENCODING"
ERROR_CODE_INVALID_STORAGE_PATH = "INVALID_STORAGE_PATH"
ERROR_CODE_INVALID_LINK_INPUT = "INVALID_LINK_INPUT"

# Quota Errors
ERROR_CODE_QUOTA_EXCEEDED = "QUOTA_EXCEEDED"

# Access Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
ERROR_CODE_FORBIDDEN = "FORBIDDEN"
ERROR_CODE_UNAUTHORIZED = "UNAUTHORIZED"

# Storage Errors
ERROR_CODE_STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"
ERROR_CODE_IMAGE_READ_FAILED = "IMAGE_READ_FAILED"

# Metadata / DynamoDB Errors
ERROR_CODE_DYNAMODB = "DYNAMODB_ERROR"
ERROR_CODE_METADATA_OPERATION_FAILED = "METADATA_OPERATION_FAILED"
ERROR_CODE_METADATA_CREATE_FAILED = "METADATA_CREATE_FAILED"
ERROR_CODE_METADATA_FETCH_FAILED = "METADATA_FETCH_FAILED"
ERROR_CODE_METADATA_UPDATE_FAILED = "METADATA_UPDATE_FAILED"
ERROR_CODE_METADATA_LIST_FAILED = "METADATA_LIST_FAILED"
ERROR_CODE_METADATA_DUPLICATE_CHECK_FAILED = "METADATA_DUPLICATE_CHECK_FAILED"
ERROR_CODE_STATS_UPDATE_FAILED = "STATS_UPDATE_FAILED"
ERROR_CODE_STATS_FETCH_FAILED = "STATS_FETCH_FAILED"
ERROR_CODE_USER_FETCH_FAILED = "USER_FETCH_FAILED"
ERROR_CODE_USER_UPDATE_FAILED = "USER_UPDATE_FAILED"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
MAX_FILENAME_LENGTH = 255

HASH_CHUNK_SIZE = 64 * 1024

# Uploads larger than this spill from memory to a temporary file
SPOOL_MAX_MEMORY = 1024 * 1024


MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(MIME_TYPE_EXTENSION_MAP.keys())

ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset(
    ext for extensions in MIME_TYPE_EXTENSION_MAP.values() for ext in extensions
)

DEFAULT_EXTENSION = "bin"


# ============================================================================
# User Defaults
# ============================================================================

DEFAULT_STORAGE_QUOTA = 1024 * 1024 * 1024  # 1GB, 0 means unlimited
UNLIMITED_REMAINING = -1

ROLE_USER = "user"
ROLE_ADMIN = "admin"

PUBLIC_IMAGE_PATH = "/i/"

LINK_FORMATS: Final[tuple[str, ...]] = ("url", "markdown", "html", "bbcode")
DEFAULT_LINK_FORMAT = "url"

WATERMARK_POSITIONS: Final[tuple[str, ...]] = (
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
    "center",
)
DEFAULT_WATERMARK_POSITION = "bottom-right"
DEFAULT_COMPRESS_QUALITY = 80
MAX_WATERMARK_TEXT_LENGTH = 100

# Served bytes of a random image may be cached this long
RANDOM_IMAGE_CACHE_CONTROL = "public, max-age=3600"


# ============================================================================
# Image Metadata Constraints
# ============================================================================

MAX_TAGS = 10
TAG_MAX_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 1000
MAX_BATCH_FILES = 20
MAX_BATCH_DELETE = 100

# ============================================================================
# Pagination Constraints
# ============================================================================

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_OFFSET = 0

# ============================================================================
# DynamoDB Indexes
# ============================================================================

USER_CREATED_INDEX = "user-created-index"
USER_FILEHASH_INDEX = "user-filehash-index"
BATCH_GET_MAX_KEYS = 100

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,X-Image-UUID"
DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_URL_SCHEME = "https"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_METADATA_TABLE_NAME = "IMAGE_METADATA_TABLE_NAME"
ENV_IMAGE_STATS_TABLE_NAME = "IMAGE_STATS_TABLE_NAME"
ENV_USER_PROFILE_TABLE_NAME = "USER_PROFILE_TABLE_NAME"
ENV_IMAGE_STORAGE_ROOT = "IMAGE_STORAGE_ROOT"
ENV_MAX_UPLOAD_SIZE = "MAX_UPLOAD_SIZE"
ENV_ALLOWED_MIME_TYPES = "ALLOWED_MIME_TYPES"

DEFAULT_STORAGE_ROOT = "./uploads"

# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
