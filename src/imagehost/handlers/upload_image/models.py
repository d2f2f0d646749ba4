"""Pydantic models for image upload request/response."""

from pydantic import BaseModel, ConfigDict, Field

from imagehost.core.models.image import AssetView
from imagehost.core.models.upload import UploadFailure, UploadItem, UploadResult
from imagehost.core.utils.constants import MAX_BATCH_FILES


class UploadFilePayload(BaseModel):
    """One file of a JSON upload request.

    Fields are accepted as sent. Filename, type, encoding and size are
    checked per item by the upload pipeline so one bad file only fails
    itself.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    filename: str = Field("", description="Original file name")
    mime_type: str = Field("", description="Declared MIME type")
    file: str = Field("", description="Base64 encoded image file")
    size: int | None = Field(
        None,
        description="Declared size in bytes; defaults to the decoded length",
    )

    def to_upload_item(self) -> UploadItem:
        return UploadItem(
            filename=self.filename,
            mime_type=self.mime_type,
            encoded=self.file,
            declared_size=self.size,
        )


class ImageUploadRequest(BaseModel):
    """Validation model for a batch upload request."""

    files: list[UploadFilePayload] = Field(..., min_length=1, max_length=MAX_BATCH_FILES)

    def to_upload_items(self) -> list[UploadItem]:
        return [payload.to_upload_item() for payload in self.files]


class ImageUploadResponse(BaseModel):
    """Per-batch outcome returned to the client."""

    created: list[AssetView] = Field(default_factory=list)
    deduped: list[AssetView] = Field(default_factory=list)
    errors: list[UploadFailure] = Field(default_factory=list)
    message: str

    @classmethod
    def from_result(cls, result: UploadResult) -> "ImageUploadResponse":
        total = result.succeeded + len(result.errors)
        return cls(
            created=result.created,
            deduped=result.deduped,
            errors=result.errors,
            message=f"{result.succeeded} of {total} files uploaded",
        )
