"""Upload pipeline input and result models."""

import base64
import binascii
import io
from typing import IO, Any

from pydantic import BaseModel, Field

from imagehost.core.models.errors import ValidationError
from imagehost.core.models.image import AssetView
from imagehost.core.utils.constants import ERROR_CODE_INVALID_FILE_ENCODING


class UploadItem(BaseModel):
    """One incoming file of an upload batch.

    Content arrives either as a readable ``stream`` or as base64 text in
    ``encoded``. Nothing here is validated eagerly so that a bad item is
    reported on its own instead of failing the whole batch.
    """

    filename: str = ""
    mime_type: str = ""
    stream: Any = Field(None, description="Readable binary file-like object")
    encoded: str | None = Field(None, description="Base64 encoded content")
    declared_size: int | None = Field(
        None,
        description="Size claimed by the client; defaults to the received length",
    )

    def open_stream(self) -> IO[bytes]:
        """Return the item's content as a binary stream.

        Raises:
            ValidationError: If ``encoded`` is not valid base64
        """
        if self.stream is not None:
            return self.stream

        try:
            content = base64.b64decode(self.encoded or "", validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                message="Invalid base64 encoded file",
                error_code=ERROR_CODE_INVALID_FILE_ENCODING,
            ) from exc

        return io.BytesIO(content)


class UploadFailure(BaseModel):
    """Why a single batch item was not stored."""

    filename: str
    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class UploadResult(BaseModel):
    """Outcome of an upload batch.

    Partial success is a normal outcome: ``errors`` may be non-empty while
    ``created``/``deduped`` hold the items that went through.
    """

    created: list[AssetView] = Field(default_factory=list)
    deduped: list[AssetView] = Field(default_factory=list)
    errors: list[UploadFailure] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.created) + len(self.deduped)
