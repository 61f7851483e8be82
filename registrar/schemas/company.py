"""Pydantic schemas for company registration and administration."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from registrar.schemas.types import blank_to_none, strip_required


class CompanyRegistration(BaseModel):
    """Full registration submitted by the company itself."""

    name: str
    phone_number: str
    address: str
    email: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    business_type: Optional[str] = None
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    registration_fee: Optional[float] = Field(default=None, ge=0)
    group_id: Optional[UUID] = None

    @field_validator("name", "phone_number", "address", mode="before")
    @classmethod
    def required_text(cls, v, info):
        return strip_required(v, info.field_name)

    @field_validator("group_id", mode="before")
    @classmethod
    def empty_group(cls, v):
        return blank_to_none(v)


# Fields an existing company may receive from a later full registration
REGISTRATION_MERGE_FIELDS = (
    "logo",
    "description",
    "business_type",
    "registration_number",
    "tax_id",
    "website",
    "registration_fee",
)


class CompanyUpdate(BaseModel):
    """Admin edit. Identifiers, code, group and link are not editable here."""

    name: Optional[str] = None
    registrant_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    business_type: Optional[str] = None
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    registration_fee: Optional[float] = Field(default=None, ge=0)
    status: Optional[Literal["pending", "approved", "rejected"]] = None
    payment_status: Optional[str] = None
    paid: Optional[bool] = None
    spent: Optional[bool] = None

    model_config = {"extra": "forbid"}


class CompanyReject(BaseModel):
    reason: Optional[str] = ""


class CompanyPaymentFlags(BaseModel):
    spent: Optional[bool] = None
    paid: Optional[bool] = None

    @model_validator(mode="after")
    def at_least_one(self):
        if self.spent is None and self.paid is None:
            raise ValueError("At least one field (spent or paid) must be provided")
        return self


class CompanyResponse(BaseModel):
    id: UUID
    name: str
    code: str = ""
    registrant_name: str = ""
    email: str = ""
    phone_number: str = ""
    address: str = ""
    logo: str = ""
    description: str = ""
    business_type: str = ""
    registration_number: str = ""
    tax_id: str = ""
    website: str = ""
    registration_fee: float = 0
    group_id: Optional[UUID] = None
    status: str
    payment_status: str = "pending"
    paid: bool = False
    spent: bool = False
    imported: bool = False
    pre_registration_id: Optional[UUID] = None
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PublicQueueEntry(BaseModel):
    name: str
    user_name: str
    paid: bool
    created_at: Optional[datetime] = None
