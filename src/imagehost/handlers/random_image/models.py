from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

RandomMode = Literal["json", "image", "redirect"]

MODE_SUFFIXES: dict[str, RandomMode] = {"image": "image", "redirect": "redirect"}


class RandomImageRequest(BaseModel):
    """Filters and response mode of a random image request.

    ``/random`` answers with metadata, ``/random/image`` with the bytes and
    ``/random/redirect`` with a 302 to the image's public URL.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str | None = Field(None, max_length=128, description="Only this owner's images")
    tags: str | None = Field(None, max_length=100, description="Substring of one of the tags")
    mode: RandomMode = "json"

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "RandomImageRequest":
        path_params = event.get("pathParameters") or {}
        query_params = event.get("queryStringParameters") or {}

        mode = path_params.get("mode")
        if not mode:
            last_segment = (event.get("path") or "").rstrip("/").rsplit("/", 1)[-1]
            mode = MODE_SUFFIXES.get(last_segment, "json")

        return cls.model_validate(
            {
                "user_id": query_params.get("user_id") or None,
                "tags": query_params.get("tags") or None,
                "mode": mode,
            }
        )
