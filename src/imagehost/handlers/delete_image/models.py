"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from imagehost.core.utils.constants import MAX_BATCH_DELETE


class DeleteImageRequest(BaseModel):
    """Validation model for delete image request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: str = Field(
        ...,
        min_length=1,
        description="Image ID to delete",
    )


class DeleteImageResponse(BaseModel):
    """Response model for successful image deletion."""

    image_id: str = Field(..., description="Deleted image ID")
    message: str = Field(..., description="Success message")
    deleted_at: str = Field(..., description="Deletion timestamp")


class BatchDeleteRequest(BaseModel):
    """Validation model for batch delete request."""

    image_ids: list[str] = Field(..., min_length=1, max_length=MAX_BATCH_DELETE)

    @field_validator("image_ids")
    @classmethod
    def dedupe_ids(cls, value: list[str]) -> list[str]:
        ids = list(dict.fromkeys(v.strip() for v in value if v and v.strip()))
        if not ids:
            raise ValueError("image_ids must contain at least one id")
        return ids


class BatchDeleteResponse(BaseModel):
    """Response model for batch deletion."""

    deleted_count: int
    deleted: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    message: str
