"""Pydantic schemas for bot groups."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from zyrotech.schemas.common import CamelModel


class GroupWrite(CamelModel):
    """Create/update payload; a missing name is reported as ``missing-group-name``."""
    name: Optional[str] = Field(None, max_length=100, description="Group name")


class GroupSummary(CamelModel):
    id: UUID
    name: str


class GroupResponse(GroupSummary):
    created_at: datetime
    updated_at: datetime
