"""Pydantic schemas for pre-registration."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from registrar.schemas.company import CompanyResponse
from registrar.schemas.types import blank_to_none, strip_optional, strip_required


class PreRegistrationSubmit(BaseModel):
    name: str
    mobile_number: str
    company_name: str
    code: str = ""
    group_id: Optional[UUID] = None

    @field_validator("name", "mobile_number", "company_name", mode="before")
    @classmethod
    def required_text(cls, v, info):
        return strip_required(v, info.field_name)

    @field_validator("code", mode="before")
    @classmethod
    def clean_code(cls, v):
        return strip_optional(v)

    @field_validator("group_id", mode="before")
    @classmethod
    def empty_group(cls, v):
        return blank_to_none(v)


class PreRegistrationResponse(BaseModel):
    id: UUID
    name: str
    mobile_number: str
    company_name: str
    code: str = ""
    group_id: Optional[UUID] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PreRegistrationOutcome(BaseModel):
    """Result of a pre-registration submission."""

    pre_registration_id: UUID
    company_id: Optional[UUID] = None
    company: Optional[CompanyResponse] = None
    updated: bool = False
    message: str
    pre_registration: PreRegistrationResponse


class PreRegistrationVerify(BaseModel):
    mobile_number: str
    code: str

    @field_validator("mobile_number", "code", mode="before")
    @classmethod
    def required_text(cls, v, info):
        return strip_required(v, info.field_name)


class PreRegistrationVerifyResponse(BaseModel):
    valid: bool
    pre_registration_id: UUID
    data: PreRegistrationResponse


class PublicPreRegistration(BaseModel):
    id: UUID
    name: str
    mobile_number: str
    contact_name: str


class CodeAutofill(BaseModel):
    """Registration form auto-fill resolved from a code."""

    code: str
    name: str
    mobile_number: str
    company_name: str
