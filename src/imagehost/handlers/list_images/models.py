"""
Pydantic models for the list images request.
"""

from pydantic import BaseModel, ConfigDict, Field

from imagehost.core.utils.constants import DEFAULT_LIMIT, DEFAULT_OFFSET, MAX_LIMIT, MIN_LIMIT


class ListImagesRequest(BaseModel):
    """
    Validation model for list images API.

    The caller's own images are listed; ``keyword`` narrows them by name,
    description or tag.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    keyword: str | None = Field(
        None,
        max_length=100,
        description="Case-insensitive match on name, description or tags",
    )

    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=MIN_LIMIT,
        le=MAX_LIMIT,
        description="Results per page (1-100)",
    )
    offset: int = Field(
        default=DEFAULT_OFFSET,
        ge=0,
        description="Pagination offset",
    )
