"""Shared schema building blocks."""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exchanging camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    """Page metadata returned next to paginated lists."""
    current_page: int = Field(..., description="1-based page number")
    total_pages: int = Field(..., description="Number of pages for the current filter")
    total_signals: int = Field(..., description="Number of matching signals")
    has_next_page: bool
    has_prev_page: bool


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise client timestamps to the naive UTC values stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
