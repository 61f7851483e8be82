"""Company registration and administration endpoints."""

from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Response

from registrar.api.deps import (
    AdminPrincipal,
    DbSession,
    OptionalPrincipal,
    RegistrationOpen,
    StaffPrincipal,
)
from registrar.schemas.company import (
    CompanyPaymentFlags,
    CompanyRegistration,
    CompanyReject,
    CompanyResponse,
    CompanyUpdate,
    PublicQueueEntry,
)
from registrar.services.companies import CompanyService
from registrar.services.reconciliation import RegistrationReconciler

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/admin", response_model=List[CompanyResponse])
async def list_all_companies(db: DbSession, admin: AdminPrincipal):
    """All companies regardless of status, newest first."""
    companies = await CompanyService(db).list_companies(include_unapproved=True)
    return [CompanyResponse.model_validate(c) for c in companies]


@router.get("", response_model=List[CompanyResponse])
async def list_companies(db: DbSession, principal: OptionalPrincipal):
    """Approved companies, or every company for admin and accounting."""
    include_unapproved = principal is not None and principal.is_privileged
    companies = await CompanyService(db).list_companies(include_unapproved=include_unapproved)
    return [CompanyResponse.model_validate(c) for c in companies]


@router.get("/public-queue", response_model=List[PublicQueueEntry])
async def public_queue(db: DbSession):
    return await CompanyService(db).public_queue()


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: UUID, db: DbSession, principal: OptionalPrincipal):
    include_unapproved = principal is not None and principal.is_privileged
    company = await CompanyService(db).get_company(company_id, include_unapproved=include_unapproved)
    return CompanyResponse.model_validate(company)


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=201,
    dependencies=[RegistrationOpen],
)
async def register_company(body: CompanyRegistration, response: Response, db: DbSession):
    """Full registration. A company created from a pre-registration is updated in place."""
    result = await RegistrationReconciler(db).register_company(body)
    if not result.created:
        response.status_code = 200
    return CompanyResponse.model_validate(result.company)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(company_id: UUID, body: CompanyUpdate, db: DbSession, admin: AdminPrincipal):
    company = await CompanyService(db).update_company(company_id, body)
    return CompanyResponse.model_validate(company)


@router.post("/{company_id}/approve", response_model=CompanyResponse)
async def approve_company(company_id: UUID, db: DbSession, admin: AdminPrincipal):
    company = await CompanyService(db).approve_company(company_id)
    return CompanyResponse.model_validate(company)


@router.post("/{company_id}/reject", response_model=CompanyResponse)
async def reject_company(company_id: UUID, body: CompanyReject, db: DbSession, admin: AdminPrincipal):
    company = await CompanyService(db).reject_company(company_id, body.reason)
    return CompanyResponse.model_validate(company)


@router.patch("/{company_id}/status", response_model=CompanyResponse)
async def update_payment_status(
    company_id: UUID,
    body: CompanyPaymentFlags,
    db: DbSession,
    staff: StaffPrincipal,
):
    """Set the spent/paid flags (admin or accounting)."""
    company = await CompanyService(db).update_payment_flags(company_id, body)
    return CompanyResponse.model_validate(company)


@router.delete("/{company_id}")
async def delete_company(company_id: UUID, db: DbSession, admin: AdminPrincipal):
    await CompanyService(db).delete_company(company_id)
    logger.info(f"Company {company_id} deleted by {admin.identity}")
    return {"message": "Company deleted successfully"}
