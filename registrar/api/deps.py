"""
FastAPI Dependencies

Provides dependency injection for database sessions, the caller principal
and the registration schedule gate.

SECURITY NOTES:
- JWT payloads are never logged
- Admin routes answer 401 without a valid token and 403 for the wrong role
"""

from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from registrar.database import get_db
from registrar.exceptions import ForbiddenError, RegistrationClosedError, UnauthorizedError
from registrar.security.principal import Principal, decode_principal
from registrar.services.schedule import ScheduleService

logger = logging.getLogger(__name__)


# HTTP Bearer for JWT
security = HTTPBearer(auto_error=False)


async def get_optional_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)] = None,
) -> Optional[Principal]:
    """Principal for public routes. A bad token is treated as anonymous."""
    if not credentials:
        return None
    return decode_principal(credentials.credentials)


async def get_current_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)] = None,
) -> Principal:
    if not credentials:
        raise UnauthorizedError()
    principal = decode_principal(credentials.credentials)
    if principal is None:
        raise UnauthorizedError("Could not validate credentials")
    return principal


async def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    if not principal.is_admin:
        logger.warning(f"Admin access denied for {principal.identity}")
        raise ForbiddenError("Admin access required")
    return principal


async def require_admin_or_accounting(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    if not principal.is_privileged:
        raise ForbiddenError("Admin or accounting access required")
    return principal


async def require_registration_open(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Optional[Principal], Depends(get_optional_principal)],
) -> None:
    """Reject registration writes while the schedule is closed.

    Admin and accounting callers are let through so staff can register on
    behalf of a company outside the window.
    """
    if principal is not None and principal.is_privileged:
        return
    status = await ScheduleService(db).current_status()
    if not status.is_open:
        raise RegistrationClosedError(status.message)


# Type aliases for cleaner endpoint signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
OptionalPrincipal = Annotated[Optional[Principal], Depends(get_optional_principal)]
AdminPrincipal = Annotated[Principal, Depends(require_admin)]
StaffPrincipal = Annotated[Principal, Depends(require_admin_or_accounting)]
RegistrationOpen = Depends(require_registration_open)
