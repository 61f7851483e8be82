"""Company-name directory endpoints."""

from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter

from registrar.api.deps import AdminPrincipal, DbSession
from registrar.exceptions import NotFoundError
from registrar.schemas.company_name import (
    CompanyNameCreate,
    CompanyNameImportRequest,
    CompanyNameResponse,
    CompanyNameUpdate,
    ImportResult,
    UnregisteredCompanyName,
)
from registrar.services.code_registry import CodeRegistry, lookup_by_code

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/public", response_model=List[CompanyNameResponse])
async def list_public(db: DbSession):
    """Directory for the registration form, by name."""
    entries = await CodeRegistry(db).list_entries(order_by_name=True)
    return [CompanyNameResponse.model_validate(e) for e in entries]


@router.get("/code/{code}", response_model=CompanyNameResponse)
async def get_by_code(code: str, db: DbSession):
    entry = await lookup_by_code(db, code)
    if entry is None:
        raise NotFoundError("Company with this code")
    return CompanyNameResponse.model_validate(entry)


@router.get("", response_model=List[CompanyNameResponse])
async def list_entries(db: DbSession, admin: AdminPrincipal):
    entries = await CodeRegistry(db).list_entries()
    return [CompanyNameResponse.model_validate(e) for e in entries]


@router.get("/unregistered", response_model=List[UnregisteredCompanyName])
async def list_unregistered(db: DbSession, admin: AdminPrincipal):
    """Directory entries with neither a company nor a pre-registration."""
    return await CodeRegistry(db).list_unregistered()


@router.get("/{entry_id}", response_model=CompanyNameResponse)
async def get_entry(entry_id: UUID, db: DbSession, admin: AdminPrincipal):
    entry = await CodeRegistry(db).get_entry(entry_id)
    return CompanyNameResponse.model_validate(entry)


@router.post("", response_model=CompanyNameResponse, status_code=201)
async def create_entry(body: CompanyNameCreate, db: DbSession, admin: AdminPrincipal):
    entry = await CodeRegistry(db).create_entry(body)
    return CompanyNameResponse.model_validate(entry)


@router.post("/import", response_model=ImportResult)
async def import_entries(body: CompanyNameImportRequest, db: DbSession, admin: AdminPrincipal):
    """Batch import; failing lines are reported, not fatal."""
    result = await CodeRegistry(db).import_entries(body.items())
    logger.info(f"Import by {admin.identity}: {result.imported}/{result.total_rows} imported")
    return result


@router.put("/{entry_id}", response_model=CompanyNameResponse)
async def update_entry(entry_id: UUID, body: CompanyNameUpdate, db: DbSession, admin: AdminPrincipal):
    entry = await CodeRegistry(db).update_entry(entry_id, body)
    return CompanyNameResponse.model_validate(entry)


@router.delete("/all")
async def delete_all(db: DbSession, admin: AdminPrincipal):
    deleted = await CodeRegistry(db).delete_all()
    return {"message": "All company names deleted successfully", "deleted_count": deleted}


@router.delete("/{entry_id}")
async def delete_entry(entry_id: UUID, db: DbSession, admin: AdminPrincipal):
    await CodeRegistry(db).delete_entry(entry_id)
    return {"message": "Company name deleted successfully"}
