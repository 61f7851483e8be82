"""
RFC 7807 Problem Details exception handling.

Every failure the registration engine can produce is one of the exception
classes below. They render as ``application/problem+json`` with a
machine-readable ``code`` so callers can tell a duplicate registration from a
full group or a closed registration window.

See: https://datatracker.ietf.org/doc/html/rfc7807
"""

from typing import Optional, Dict, Any, List
from enum import Enum
from pydantic import BaseModel, Field
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import traceback
import uuid
from registrar.database import utcnow

from registrar.core.metrics import track_error

logger = logging.getLogger(__name__)


def _get_trace_id() -> str:
    """Get trace ID from correlation context or generate a new one."""
    from registrar.middleware.correlation import get_request_id

    request_id = get_request_id()
    if request_id and request_id != "unknown":
        return request_id
    return str(uuid.uuid4())[:12]


class ErrorCode(str, Enum):
    """Standardized error codes for the registration API."""

    # Authentication & Authorization
    UNAUTHORIZED = "AUTH_001"
    FORBIDDEN = "AUTH_002"

    # Validation
    VALIDATION_ERROR = "VAL_001"
    CONSTRAINT_VIOLATION = "VAL_004"

    # Resource
    NOT_FOUND = "RES_001"
    CONFLICT = "RES_003"

    # Registration
    ALREADY_REGISTERED = "REG_001"
    DUPLICATE_CODE = "REG_002"
    REGISTRY_EXHAUSTED = "REG_003"

    # Capacity
    GROUP_FULL = "CAP_001"
    GROUP_CLOSED = "CAP_002"

    # Schedule
    REGISTRATION_CLOSED = "SCH_001"

    # Server
    INTERNAL_ERROR = "SRV_001"
    SERVICE_UNAVAILABLE = "SRV_002"


class ProblemDetail(BaseModel):
    """
    RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short, human-readable summary
        status: HTTP status code
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying this specific occurrence
        code: Machine-readable error code for client handling
        timestamp: ISO 8601 timestamp of when the error occurred
        trace_id: Unique identifier for tracing in logs
        errors: List of field-level validation errors (for 422)
        retry_after: Seconds to wait before retrying
    """

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    code: str
    timestamp: str
    trace_id: str
    errors: Optional[List[Dict[str, Any]]] = None
    retry_after: Optional[int] = None


def _problem_type(code: ErrorCode) -> str:
    return f"urn:registrar:problem:{code.value.lower().replace('_', '-')}"


class RegistrarException(HTTPException):
    """
    Base exception for the registration API with RFC 7807 support.

    Usage:
        raise RegistrarException(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail="Group not found",
        )
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        title: Optional[str] = None,
        instance: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        retry_after: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.errors = errors
        self.retry_after = retry_after
        self.trace_id = _get_trace_id()
        self.timestamp = utcnow().isoformat().replace("+00:00", "Z")

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title based on status code."""
        titles = {
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            409: "Conflict",
            422: "Validation Error",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")

    def to_problem_detail(self) -> ProblemDetail:
        """Convert to RFC 7807 ProblemDetail."""
        return ProblemDetail(
            type=_problem_type(self.code),
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            instance=self.instance,
            code=self.code.value,
            timestamp=self.timestamp,
            trace_id=self.trace_id,
            errors=self.errors,
            retry_after=self.retry_after,
        )


# Convenience exception classes

class NotFoundError(RegistrarException):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = (
            f"{resource} with ID {resource_id} was not found"
            if resource_id is not None
            else f"{resource} not found"
        )
        super().__init__(status_code=404, code=ErrorCode.NOT_FOUND, detail=detail)
        self.resource = resource


class GroupNotFoundError(NotFoundError):
    """Referenced group does not exist (404)."""

    def __init__(self, group_id):
        super().__init__("Group", str(group_id))


class ValidationError(RegistrarException):
    """Missing or malformed input (422). No state was changed."""

    def __init__(
        self,
        detail: str,
        errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=422,
            code=ErrorCode.VALIDATION_ERROR,
            detail=detail,
            errors=errors,
        )


class UnauthorizedError(RegistrarException):
    """Authentication required (401)."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=401,
            code=ErrorCode.UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(RegistrarException):
    """Permission denied (403)."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status_code=403, code=ErrorCode.FORBIDDEN, detail=detail)


class ConflictError(RegistrarException):
    """Resource conflict (409)."""

    def __init__(self, detail: str):
        super().__init__(status_code=409, code=ErrorCode.CONFLICT, detail=detail)


class AlreadyRegisteredError(RegistrarException):
    """The submitted identity is already owned by a company (409)."""

    def __init__(self, detail: str = "This company is already registered."):
        super().__init__(status_code=409, code=ErrorCode.ALREADY_REGISTERED, detail=detail)


class DuplicateCodeError(RegistrarException):
    """A code is already held by another record (409)."""

    def __init__(self, code: str, detail: Optional[str] = None):
        super().__init__(
            status_code=409,
            code=ErrorCode.DUPLICATE_CODE,
            detail=detail or f"Code {code} is already in use",
        )
        self.duplicate_code = code


class RegistryExhaustedError(RegistrarException):
    """No free code found within the attempt budget (503, safe to retry)."""

    def __init__(self, attempts: int, retry_after: int = 1):
        super().__init__(
            status_code=503,
            code=ErrorCode.REGISTRY_EXHAUSTED,
            detail=f"Unable to generate a unique code after {attempts} attempts. Please try again.",
            retry_after=retry_after,
            headers={"Retry-After": str(retry_after)},
        )


class CapacityExceededError(RegistrarException):
    """Base for group admission failures."""


class GroupFullError(CapacityExceededError):
    """Group has no free slot (409)."""

    def __init__(self, group_id=None):
        super().__init__(
            status_code=409,
            code=ErrorCode.GROUP_FULL,
            detail="This group is full and no longer accepting registrations.",
        )
        self.group_id = group_id


class GroupClosedError(CapacityExceededError):
    """Group is closed (409)."""

    def __init__(self, group_id=None):
        super().__init__(
            status_code=409,
            code=ErrorCode.GROUP_CLOSED,
            detail="This group is closed and no longer accepting registrations.",
        )
        self.group_id = group_id


class RegistrationClosedError(RegistrarException):
    """Registration window is closed (503)."""

    def __init__(self, message: str = ""):
        super().__init__(
            status_code=503,
            code=ErrorCode.REGISTRATION_CLOSED,
            detail=message or "Registration is temporarily unavailable. Please try again later.",
            title="Registration is currently closed",
        )


# Exception handlers for FastAPI

def create_problem_response(
    status_code: int,
    code: ErrorCode,
    detail: str,
    request: Request,
    errors: Optional[List[Dict[str, Any]]] = None,
    trace_id: Optional[str] = None,
) -> JSONResponse:
    """Create a RFC 7807 compliant JSON response."""
    problem = ProblemDetail(
        type=_problem_type(code),
        title=RegistrarException._default_title(status_code),
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        code=code.value,
        timestamp=utcnow().isoformat().replace("+00:00", "Z"),
        trace_id=trace_id or _get_trace_id(),
        errors=errors,
    )

    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


async def registrar_exception_handler(request: Request, exc: RegistrarException) -> JSONResponse:
    """Handle RegistrarException with RFC 7807 response."""
    logger.warning(
        f"RegistrarException: {exc.code.value} - {exc.detail}",
        extra={
            "trace_id": exc.trace_id,
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )
    track_error(exc.code.name.lower())

    problem = exc.to_problem_detail()
    if problem.instance is None:
        problem.instance = request.url.path

    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle standard HTTPException with RFC 7807 response."""
    code_map = {
        400: ErrorCode.VALIDATION_ERROR,
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.CONFLICT,
        422: ErrorCode.VALIDATION_ERROR,
        500: ErrorCode.INTERNAL_ERROR,
        503: ErrorCode.SERVICE_UNAVAILABLE,
    }
    code = code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)

    return create_problem_response(
        status_code=exc.status_code,
        code=code,
        detail=str(exc.detail),
        request=request,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return create_problem_response(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request validation failed",
        request=request,
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with RFC 7807 response."""
    trace_id = str(uuid.uuid4())[:12]

    logger.error(
        f"Unhandled exception: {exc}",
        extra={"trace_id": trace_id, "path": request.url.path},
    )
    logger.error(traceback.format_exc())
    track_error("unhandled")

    # Don't expose internal details in production
    from registrar.config import settings
    detail = str(exc) if settings.DEBUG else "An unexpected error occurred"

    return create_problem_response(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
        request=request,
        trace_id=trace_id,
    )


def register_exception_handlers(app) -> None:
    """Attach the problem-details handlers to a FastAPI app."""
    app.add_exception_handler(RegistrarException, registrar_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
