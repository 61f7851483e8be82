"""Pydantic schemas for the company-name code registry."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from registrar.schemas.types import strip_optional, strip_required


class CompanyNameCreate(BaseModel):
    name: str
    contact_name: str = ""
    mobile_number: str = ""
    notes: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def required_name(cls, v):
        return strip_required(v, "name")

    @field_validator("contact_name", "mobile_number", mode="before")
    @classmethod
    def clean(cls, v):
        return strip_optional(v)


class CompanyNameUpdate(BaseModel):
    name: Optional[str] = None
    contact_name: Optional[str] = None
    mobile_number: Optional[str] = None
    # "" asks for a freshly generated code
    code: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", mode="before")
    @classmethod
    def non_blank_name(cls, v):
        if v is None:
            return v
        return strip_required(v, "name")

    @field_validator("contact_name", "mobile_number", "code", mode="before")
    @classmethod
    def clean(cls, v):
        return None if v is None else strip_optional(v)


class CompanyNameResponse(BaseModel):
    id: UUID
    name: str
    code: str
    contact_name: str = ""
    mobile_number: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UnregisteredCompanyName(CompanyNameResponse):
    is_registered: bool = False
    has_pre_registration: bool = False


class CompanyNameImportItem(BaseModel):
    name: Any = ""
    contact_name: Any = ""
    mobile_number: Any = ""
    code: Any = ""
    notes: Any = ""


class CompanyNameImportRequest(BaseModel):
    """Batch import. ``names`` is the legacy plain-list format."""

    companies: Optional[List[Union[CompanyNameImportItem, str]]] = None
    names: Optional[List[Any]] = None

    @model_validator(mode="after")
    def require_list(self):
        if self.companies is None and self.names is None:
            raise ValueError("Companies array is required")
        return self

    def items(self) -> List[CompanyNameImportItem]:
        if self.companies is not None:
            return [
                CompanyNameImportItem(name=entry) if isinstance(entry, str) else entry
                for entry in self.companies
            ]
        return [CompanyNameImportItem(name=str(name)) for name in self.names or []]


class ImportResult(BaseModel):
    success: bool
    total_rows: int
    imported: int
    skipped: int
    errors: int
    imported_ids: List[UUID]
    skipped_details: List[Dict[str, Any]]
    error_details: List[Dict[str, Any]]
