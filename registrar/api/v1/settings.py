"""Website schedule endpoints."""

import logging

from fastapi import APIRouter

from registrar.api.deps import AdminPrincipal, DbSession
from registrar.schemas.settings import ScheduleStatus, WebsiteSettingsUpdate
from registrar.services.schedule import ScheduleService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/website", response_model=ScheduleStatus)
async def get_website_settings(db: DbSession):
    """Current schedule. Reading may persist a due automatic transition."""
    return await ScheduleService(db).current_status()


@router.put("/website", response_model=ScheduleStatus)
async def update_website_settings(body: WebsiteSettingsUpdate, db: DbSession, admin: AdminPrincipal):
    row = await ScheduleService(db).set_schedule(body, updated_by=admin.identity)
    return ScheduleStatus(
        is_open=row.is_open,
        message=row.message,
        open_time=row.open_time,
        close_time=row.close_time,
        auto_schedule=row.auto_schedule,
        codes_active=row.codes_active,
        post_registration_message=row.post_registration_message,
    )
