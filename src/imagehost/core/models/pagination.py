"""Offset pagination metadata."""

from pydantic import BaseModel, Field, StrictBool, StrictInt


class PaginationInfo(BaseModel):
    """Where a returned page sits in the full, filtered result set."""

    limit: StrictInt = Field(..., description="Page size requested")
    offset: StrictInt = Field(..., description="Index of the first returned item")
    has_more: StrictBool = Field(..., description="True when items exist past this page")
    next_offset: StrictInt | None = Field(None, description="Offset of the following page")
    current_page: StrictInt = Field(1, description="1-based page number")
    total_pages: StrictInt = Field(0, description="Pages needed for all items at this limit")

    @classmethod
    def for_page(cls, *, offset: int, limit: int, total_count: int) -> "PaginationInfo":
        """Page numbering starts at 1 and ``total_pages`` rounds up."""
        has_more = offset + limit < total_count

        return cls(
            limit=limit,
            offset=offset,
            has_more=has_more,
            next_offset=offset + limit if has_more else None,
            current_page=offset // limit + 1,
            total_pages=-(-total_count // limit),
        )
