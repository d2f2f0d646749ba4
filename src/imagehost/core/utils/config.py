"""Runtime configuration loaded from the Lambda environment."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from imagehost.core.utils.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_STORAGE_ROOT,
    ENV_ALLOWED_MIME_TYPES,
    ENV_IMAGE_STORAGE_ROOT,
    ENV_MAX_UPLOAD_SIZE,
    MAX_FILE_SIZE,
)


class UploadSettings(BaseModel):
    """Upload limits and storage location consumed by the pipeline."""

    model_config = ConfigDict(frozen=True)

    max_upload_size: int = Field(MAX_FILE_SIZE, gt=0, description="Per-file limit in bytes")
    allowed_mime_types: frozenset[str] = Field(ALLOWED_MIME_TYPES)
    storage_root: Path = Field(Path(DEFAULT_STORAGE_ROOT))

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def split_mime_types(cls, value: object) -> object:
        """Accept a comma-separated string as well as any iterable."""
        if isinstance(value, str):
            return frozenset(v.strip().lower() for v in value.split(",") if v.strip())
        return value


def load_settings() -> UploadSettings:
    """Build settings from environment variables, keeping defaults for unset ones."""
    values: dict[str, object] = {}

    if max_size := os.getenv(ENV_MAX_UPLOAD_SIZE):
        values["max_upload_size"] = int(max_size)

    if mime_types := os.getenv(ENV_ALLOWED_MIME_TYPES):
        values["allowed_mime_types"] = mime_types

    if storage_root := os.getenv(ENV_IMAGE_STORAGE_ROOT):
        values["storage_root"] = Path(storage_root)

    return UploadSettings.model_validate(values)
