"""Shared image (asset) models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from imagehost.core.models.pagination import PaginationInfo
from imagehost.core.utils.constants import (
    DEFAULT_LINK_FORMAT,
    MAX_DESCRIPTION_LENGTH,
    MAX_TAGS,
    TAG_MAX_LENGTH,
)


def normalize_tags(value: Any) -> list[str] | None:
    """Normalize tags given as a comma-separated string or a list.

    Empty entries are dropped and duplicates removed while preserving order.
    """
    if value is None:
        return None

    if isinstance(value, str):
        raw_tags = [t.strip() for t in value.split(",")]
    elif isinstance(value, list):
        raw_tags = [str(t).strip() for t in value]
    else:
        raise ValueError("tags must be a string or list of strings")

    tags: list[str] = list(dict.fromkeys(t for t in raw_tags if t))

    if len(tags) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags allowed")

    if any(len(t) > TAG_MAX_LENGTH for t in tags):
        raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters")

    return tags


class Asset(BaseModel):
    """Stored image record as persisted in the metadata table.

    ``storage_path`` and ``file_hash`` are internal and never leave the
    service; use :meth:`to_view` for anything returned to callers.
    """

    image_id: StrictStr = Field(..., description="Public UUID of the image")
    user_id: StrictStr = Field(..., description="Owner user identifier")
    file_hash: StrictStr = Field(..., description="SHA-256 hex digest of the raw bytes")
    storage_path: StrictStr = Field(..., description="Content store relative path")
    original_name: StrictStr = Field(..., description="File name as uploaded")
    file_size: int = Field(..., ge=0, description="Image size in bytes")
    mime_type: StrictStr = Field(..., description="MIME type of the image (e.g. image/jpeg)")

    width: int = 0
    height: int = 0
    is_public: bool = True

    description: str | None = None
    tags: list[str] = Field(default_factory=list)

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: str | None = Field(None, description="ISO-8601 last update timestamp (UTC)")
    deleted_at: str | None = Field(None, description="Tombstone timestamp, set on delete")

    @property
    def is_tombstoned(self) -> bool:
        return self.deleted_at is not None

    def is_visible_to(self, requester_id: str | None) -> bool:
        return self.is_public or (requester_id is not None and requester_id == self.user_id)

    def to_item(self) -> dict[str, Any]:
        """DynamoDB item; unset optional attributes are omitted, not stored as NULL."""
        return self.model_dump(exclude_none=True)

    def to_view(self, *, view_count: int = 0) -> "AssetView":
        return AssetView(
            **self.model_dump(exclude={"file_hash", "storage_path", "deleted_at"}),
            view_count=view_count,
        )


class AssetView(BaseModel):
    """Image metadata returned by the API."""

    image_id: str
    user_id: str
    original_name: str
    file_size: int
    mime_type: str
    width: int
    height: int
    is_public: bool
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: str
    updated_at: str | None = None
    view_count: int = 0


class ImagePatch(BaseModel):
    """Partial update of an image's editable metadata.

    Only fields present in the request are applied. A field sent as
    ``null`` (or an empty list for tags) clears the stored value; an omitted
    field is left untouched. ``model_fields_set`` tells the two apart.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    tags: list[str] | None = None
    is_public: bool | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> list[str] | None:
        return normalize_tags(value)

    @field_validator("is_public")
    @classmethod
    def reject_null_visibility(cls, value: bool | None) -> bool | None:
        if value is None:
            raise ValueError("is_public cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, with clears normalized."""
        updates: dict[str, Any] = {}

        for field in self.model_fields_set:
            value = getattr(self, field)
            if field == "tags" and value is None:
                value = []
            if field == "description" and value == "":
                value = None
            updates[field] = value

        return updates

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class ImageLinks(BaseModel):
    """Embed snippets for a public image URL."""

    url: str
    html: str
    markdown: str
    bbcode: str
    markdown_with_link: str
    default_format: str = Field(DEFAULT_LINK_FORMAT, description="The owner's preferred snippet")


class ListImagesResponse(BaseModel):
    """Paginated response for listing images."""

    images: list[AssetView] = Field(..., description="List of image metadata objects")
    total_count: int = Field(..., description="Total number of images matching the query")
    returned_count: int = Field(..., description="Number of images returned in this response")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")
