"""Pydantic schemas for group administration."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from registrar.schemas.types import strip_required


class GroupCreate(BaseModel):
    name: str
    time_from: str
    time_to: str
    date: str
    day: str = ""
    max_companies: int = Field(default=0, ge=0)

    @field_validator("name", "time_from", "time_to", "date", mode="before")
    @classmethod
    def required_text(cls, v, info):
        return strip_required(v, info.field_name)


class GroupUpdate(BaseModel):
    """Admin edit. The slot counter and membership list are not editable."""

    name: Optional[str] = None
    time_from: Optional[str] = None
    time_to: Optional[str] = None
    date: Optional[str] = None
    day: Optional[str] = None
    max_companies: Optional[int] = Field(default=None, ge=0)
    is_closed: Optional[bool] = None

    model_config = {"extra": "forbid"}


class GroupResponse(BaseModel):
    id: UUID
    name: str
    time_from: str
    time_to: str
    date: str
    day: str = ""
    max_companies: int
    registered_count: int
    available_slots: Optional[int] = None
    is_closed: bool
    companies: List[UUID] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_group(cls, group, company_ids: List[UUID]) -> "GroupResponse":
        registered = (
            group.registered_count
            if group.registered_count is not None
            else len(company_ids)
        )
        available = None
        if group.max_companies:
            available = max(group.max_companies - registered, 0)
        return cls(
            id=group.id,
            name=group.name,
            time_from=group.time_from,
            time_to=group.time_to,
            date=group.date,
            day=group.day or "",
            max_companies=group.max_companies,
            registered_count=registered,
            available_slots=available,
            is_closed=group.is_closed,
            companies=company_ids,
            created_at=group.created_at,
            updated_at=group.updated_at,
        )


class GroupAuditEntry(BaseModel):
    group_id: UUID
    name: str
    recorded_count: int
    actual_count: int
    drift: int
    is_closed: bool
    repaired: bool = False


class GroupAuditReport(BaseModel):
    checked: int
    drifted: int
    repaired: int
    groups: List[GroupAuditEntry]
