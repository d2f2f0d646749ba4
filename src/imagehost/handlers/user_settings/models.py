"""
Pydantic models for the user settings request.
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from imagehost.core.utils.constants import (
    ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE,
    MAX_WATERMARK_TEXT_LENGTH,
)

CUSTOM_DOMAIN_PATTERN = re.compile(r"^(https?://)?[A-Za-z0-9.-]+(:\d{1,5})?/?$")


class SettingsPatch(BaseModel):
    """Partial update of an owner's preferences.

    Omitted fields are left untouched. ``custom_domain`` and
    ``watermark_text`` may be sent as ``null`` or blank to clear them; every
    other field must carry a value when present.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    custom_domain: str | None = Field(None, max_length=253)
    default_link_format: Literal["url", "markdown", "html", "bbcode"] | None = None
    enable_watermark: bool | None = None
    watermark_text: str | None = Field(None, max_length=MAX_WATERMARK_TEXT_LENGTH)
    watermark_position: (
        Literal["top-left", "top-right", "bottom-left", "bottom-right", "center"] | None
    ) = None
    compress_image: bool | None = None
    compress_quality: int | None = Field(None, ge=1, le=100)
    max_image_size: int | None = Field(None, ge=1, le=MAX_FILE_SIZE)
    allowed_image_types: list[str] | None = None

    @field_validator("custom_domain")
    @classmethod
    def validate_custom_domain(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not CUSTOM_DOMAIN_PATTERN.match(value):
            raise ValueError("custom_domain must be a host name, optionally with scheme and port")
        return value.rstrip("/")

    @field_validator("allowed_image_types", mode="before")
    @classmethod
    def validate_image_types(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        if isinstance(value, str):
            raw = value.split(",")
        elif isinstance(value, list):
            raw = [str(item) for item in value]
        else:
            raise ValueError("allowed_image_types must be a string or list of strings")

        types = list(dict.fromkeys(t.strip().lstrip(".").lower() for t in raw if t.strip()))
        if not types:
            raise ValueError("allowed_image_types cannot be empty")

        unknown = sorted(set(types) - ALLOWED_EXTENSIONS)
        if unknown:
            raise ValueError(f"Unsupported image types: {', '.join(unknown)}")

        return types

    @field_validator(
        "default_link_format",
        "enable_watermark",
        "watermark_position",
        "compress_image",
        "compress_quality",
        "max_image_size",
        "allowed_image_types",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("value cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, with clears normalized."""
        updates: dict[str, Any] = {}

        for field in self.model_fields_set:
            value = getattr(self, field)
            if field == "watermark_text" and value == "":
                value = None
            updates[field] = value

        return updates

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set
