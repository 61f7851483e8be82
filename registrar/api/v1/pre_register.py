"""Pre-registration endpoints."""

from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Response

from registrar.api.deps import AdminPrincipal, DbSession, RegistrationOpen
from registrar.schemas.company import CompanyResponse
from registrar.schemas.pre_registration import (
    CodeAutofill,
    PreRegistrationOutcome,
    PreRegistrationResponse,
    PreRegistrationSubmit,
    PreRegistrationVerify,
    PreRegistrationVerifyResponse,
    PublicPreRegistration,
)
from registrar.services.code_registry import resolve_autofill
from registrar.services.pre_registrations import PreRegistrationService
from registrar.services.reconciliation import RegistrationReconciler

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=PreRegistrationOutcome,
    status_code=201,
    dependencies=[RegistrationOpen],
)
async def submit_pre_registration(body: PreRegistrationSubmit, response: Response, db: DbSession):
    """Reserve a company identity. A repeat submission updates the existing reservation."""
    result = await RegistrationReconciler(db).submit_pre_registration(body)
    if result.updated:
        response.status_code = 200

    company = result.company
    return PreRegistrationOutcome(
        pre_registration_id=result.pre_registration.id,
        company_id=company.id if company else None,
        company=CompanyResponse.model_validate(company) if company else None,
        updated=result.updated,
        message=(
            "Pre-registration updated successfully"
            if result.updated
            else "Pre-registration successful"
        ),
        pre_registration=PreRegistrationResponse.model_validate(result.pre_registration),
    )


@router.post("/verify", response_model=PreRegistrationVerifyResponse)
async def verify_pre_registration(body: PreRegistrationVerify, db: DbSession):
    pre = await PreRegistrationService(db).verify(body.mobile_number, body.code)
    return PreRegistrationVerifyResponse(
        valid=True,
        pre_registration_id=pre.id,
        data=PreRegistrationResponse.model_validate(pre),
    )


@router.get("/public/companies", response_model=List[PublicPreRegistration])
async def list_public_pre_registrations(db: DbSession):
    """Pre-registered company names for the registration page."""
    return await PreRegistrationService(db).list_public()


@router.get("/by-code/{code}", response_model=CodeAutofill)
async def get_by_code(code: str, db: DbSession):
    """Auto-fill data for a code, from the directory or a pre-registration."""
    return await resolve_autofill(db, code)


@router.get("", response_model=List[PreRegistrationResponse])
async def list_pre_registrations(db: DbSession, admin: AdminPrincipal):
    pre_registrations = await PreRegistrationService(db).list_pre_registrations()
    return [PreRegistrationResponse.model_validate(pre) for pre in pre_registrations]


@router.get("/{pre_registration_id}", response_model=PreRegistrationResponse)
async def get_pre_registration(pre_registration_id: UUID, db: DbSession):
    pre = await PreRegistrationService(db).get_pre_registration(pre_registration_id)
    return PreRegistrationResponse.model_validate(pre)


@router.delete("/{pre_registration_id}")
async def delete_pre_registration(pre_registration_id: UUID, db: DbSession, admin: AdminPrincipal):
    await PreRegistrationService(db).delete_pre_registration(pre_registration_id)
    logger.info(f"Pre-registration {pre_registration_id} deleted by {admin.identity}")
    return {"message": "Pre-registration deleted successfully"}
