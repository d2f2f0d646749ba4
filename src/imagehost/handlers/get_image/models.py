from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

TRUTHY_FLAGS = frozenset({"1", "true", "yes"})


class GetImageRequest(BaseModel):
    """Path and query parameters of a public image request.

    The id is passed through unchecked: a malformed id must look exactly
    like an unknown one, which the resolver reports as not found.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: StrictStr = Field("", description="Public image identifier from the URL")
    metadata: bool = Field(False, description="Return JSON metadata instead of the bytes")
    download: bool = Field(False, description="Serve with Content-Disposition: attachment")

    @field_validator("metadata", "download", mode="before")
    @classmethod
    def parse_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUTHY_FLAGS

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "GetImageRequest":
        path_params = event.get("pathParameters") or {}
        query_params = event.get("queryStringParameters") or {}

        return cls.model_validate(
            {
                "image_id": path_params.get("image_id") or "",
                "metadata": query_params.get("metadata", False),
                "download": query_params.get("download", False),
            }
        )
