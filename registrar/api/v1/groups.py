"""Group endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter

from registrar.api.deps import AdminPrincipal, DbSession
from registrar.schemas.group import GroupAuditReport, GroupCreate, GroupResponse, GroupUpdate
from registrar.services.capacity import audit_groups
from registrar.services.groups import GroupService

router = APIRouter()


@router.get("/public", response_model=List[GroupResponse])
async def list_available_groups(db: DbSession):
    """Groups that still have free slots."""
    return await GroupService(db).list_available_groups()


@router.get("/public/all", response_model=List[GroupResponse])
async def list_all_groups_public(db: DbSession):
    return await GroupService(db).list_groups()


@router.get("", response_model=List[GroupResponse])
async def list_groups(db: DbSession, admin: AdminPrincipal):
    return await GroupService(db).list_groups()


@router.get("/audit", response_model=GroupAuditReport)
async def audit(db: DbSession, admin: AdminPrincipal, repair: bool = False):
    """Report (and optionally repair) slot counters that drifted from memberships."""
    return await audit_groups(db, repair=repair)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: UUID, db: DbSession, admin: AdminPrincipal):
    return await GroupService(db).get_group(group_id)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(body: GroupCreate, db: DbSession, admin: AdminPrincipal):
    return await GroupService(db).create_group(body)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(group_id: UUID, body: GroupUpdate, db: DbSession, admin: AdminPrincipal):
    return await GroupService(db).update_group(group_id, body)


@router.delete("/{group_id}")
async def delete_group(group_id: UUID, db: DbSession, admin: AdminPrincipal):
    await GroupService(db).delete_group(group_id)
    return {"message": "Group deleted successfully"}
