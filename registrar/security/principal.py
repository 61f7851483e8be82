"""
Caller principal.

The HTTP layer verifies the bearer token and hands the engine a
``Principal``; nothing below the API layer looks at transport headers.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
import logging

from jose import JWTError, jwt

from registrar.config import settings

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Caller roles."""
    USER = "user"
    ACCOUNTING = "accounting"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    identity: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_privileged(self) -> bool:
        """Admins and accounting see unapproved data and bypass the schedule."""
        return self.role in (Role.ADMIN, Role.ACCOUNTING)


def create_access_token(
    identity: str,
    role: Role = Role.USER,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT for ``identity``. Used by operators and tests."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": identity, "role": Role(role).value, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_principal(token: str) -> Optional[Principal]:
    """Decode a bearer token. Returns None when the token is not acceptable."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        # SECURITY: never log the token or its payload
        logger.warning("JWT validation failed")
        return None

    identity = payload.get("sub")
    if not identity:
        return None
    try:
        role = Role(payload.get("role", Role.USER.value))
    except ValueError:
        logger.warning("Token carries unknown role")
        return None
    return Principal(identity=str(identity), role=role)
