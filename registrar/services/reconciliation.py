"""
Reconciliation Engine - merges registration submissions into one company.

Every submission resolves an identity, ``(company_name, code)`` or the
company name alone when codes are disabled, against existing companies and
pre-registrations:

    NEW -> PRE_REGISTERED -> COMPANY_LINKED
                  \\-> REJECTED_DUPLICATE (an unlinked company owns the identity)

Storage-level unique indexes are the authoritative duplicate gate. Inserts
that lose a race raise IntegrityError, which is translated here into a
domain outcome instead of surfacing as a storage error. A repeated
submission converges on the same pre-registration/company pair.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.metrics import track_group_sync_failure, track_registration
from registrar.database import utcnow
from registrar.exceptions import (
    AlreadyRegisteredError,
    CapacityExceededError,
    GroupNotFoundError,
    RegistrarException,
    ValidationError,
)
from registrar.models.company import Company, CompanyStatus
from registrar.models.pre_registration import PreRegistration
from registrar.schemas.company import REGISTRATION_MERGE_FIELDS, CompanyRegistration
from registrar.schemas.pre_registration import PreRegistrationSubmit
from registrar.services import capacity
from registrar.services.code_registry import lookup_by_name
from registrar.services.schedule import ScheduleService
from registrar.utils.normalization import is_valid_code

logger = logging.getLogger(__name__)

# Placeholder email for companies materialized from a pre-registration
PLACEHOLDER_EMAIL_DOMAIN = "temp.com"


@dataclass
class PreRegistrationResult:
    pre_registration: PreRegistration
    company: Optional[Company]
    updated: bool


@dataclass
class CompanyRegistrationResult:
    company: Company
    created: bool


class RegistrationReconciler:
    """Resolves pre-registration and full registration submissions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _find_company(self, name: str, code: str) -> Optional[Company]:
        result = await self.db.execute(
            select(Company).where(Company.name == name, Company.code == code)
        )
        return result.scalar_one_or_none()

    async def _find_company_by_code(self, code: str) -> Optional[Company]:
        result = await self.db.execute(select(Company).where(Company.code == code))
        return result.scalar_one_or_none()

    async def _find_pre_registration(self, company_name: str, code: str) -> Optional[PreRegistration]:
        result = await self.db.execute(
            select(PreRegistration).where(
                PreRegistration.company_name == company_name,
                PreRegistration.code == code,
            )
        )
        return result.scalar_one_or_none()

    async def _linked_company(self, pre_registration_id: UUID) -> Optional[Company]:
        result = await self.db.execute(
            select(Company).where(Company.pre_registration_id == pre_registration_id)
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Group bookkeeping
    # ------------------------------------------------------------------

    async def _admit(self, group_id: UUID, company_id: UUID) -> None:
        """Admit a freshly inserted company.

        Capacity failures abort the submission. Any other failure is logged,
        counted and tolerated; ``capacity.audit_groups`` reports the drift.
        """
        try:
            async with self.db.begin_nested():
                await capacity.admit(self.db, group_id, company_id)
        except (CapacityExceededError, GroupNotFoundError):
            raise
        except SQLAlchemyError as e:
            logger.error(f"Group bookkeeping failed for company {company_id} in group {group_id}: {e}")
            track_group_sync_failure("admission_error")

    # ------------------------------------------------------------------
    # Pre-registration
    # ------------------------------------------------------------------

    async def _submission_code(self, data: PreRegistrationSubmit) -> str:
        code = data.code
        if not code and await ScheduleService(self.db).codes_active():
            raise ValidationError(
                "Code is required when codes are enabled",
                errors=[{"field": "code", "message": "Code is required when codes are enabled"}],
            )
        if code and not is_valid_code(code):
            raise ValidationError(
                "Code must be exactly 4 digits",
                errors=[{"field": "code", "message": "Code must be exactly 4 digits"}],
            )
        return code

    async def submit_pre_registration(self, data: PreRegistrationSubmit) -> PreRegistrationResult:
        try:
            code = await self._submission_code(data)
            if data.group_id is not None:
                await capacity.ensure_admissible(self.db, data.group_id)
            try:
                result = await self._reconcile_pre_registration(data, code)
            except IntegrityError:
                # A concurrent submission inserted the same identity first
                await self.db.rollback()
                logger.info(f"Pre-registration race for {data.company_name!r}, resolving as update")
                try:
                    result = await self._reconcile_pre_registration(data, code)
                except IntegrityError as e:
                    logger.warning(f"Pre-registration for {data.company_name!r} still conflicts: {e.orig}")
                    raise AlreadyRegisteredError()
            await self.db.commit()
        except RegistrarException as e:
            await self.db.rollback()
            track_registration("pre_registration", e.code.name.lower())
            raise

        outcome = "updated" if result.updated else "created"
        track_registration("pre_registration", outcome)
        logger.info(
            f"Pre-registration {outcome}: {result.pre_registration.id} "
            f"(company {result.company.id if result.company else None})"
        )
        return result

    def _apply_submission(self, pre: PreRegistration, data: PreRegistrationSubmit, code: str) -> None:
        pre.name = data.name
        pre.mobile_number = data.mobile_number
        pre.company_name = data.company_name
        pre.code = code
        pre.group_id = data.group_id or pre.group_id
        pre.status = "pending"

    async def _reconcile_pre_registration(
        self, data: PreRegistrationSubmit, code: str
    ) -> PreRegistrationResult:
        company = await self._find_company(data.company_name, code)
        if company is not None:
            if company.pre_registration_id is None:
                raise AlreadyRegisteredError(
                    "This company has already been registered."
                    if not code
                    else "This company name with this code has already been registered."
                )
            pre = await self.db.get(PreRegistration, company.pre_registration_id)
            if pre is None:
                raise AlreadyRegisteredError()
            self._apply_submission(pre, data, code)
            # Registrant, group and code stay with the company
            company.phone_number = data.mobile_number
            await self.db.flush()
            return PreRegistrationResult(pre_registration=pre, company=company, updated=True)

        pre = await self._find_pre_registration(data.company_name, code)
        if pre is not None:
            self._apply_submission(pre, data, code)
            linked = await self._linked_company(pre.id)
            if linked is not None:
                linked.registrant_name = data.name
                linked.phone_number = data.mobile_number
                await self.db.flush()
                return PreRegistrationResult(pre_registration=pre, company=linked, updated=True)
            company = await self._materialize_company(pre, data.group_id)
            return PreRegistrationResult(pre_registration=pre, company=company, updated=True)

        pre = PreRegistration(
            name=data.name,
            mobile_number=data.mobile_number,
            company_name=data.company_name,
            code=code,
            group_id=data.group_id,
            status="pending",
        )
        self.db.add(pre)
        await self.db.flush()
        company = await self._materialize_company(pre, data.group_id)
        return PreRegistrationResult(pre_registration=pre, company=company, updated=False)

    async def _materialize_company(
        self, pre: PreRegistration, group_id: Optional[UUID]
    ) -> Optional[Company]:
        """Insert the company linked to ``pre``. Returns None when a duplicate blocks it."""
        company = Company(
            name=pre.company_name,
            code=pre.code,
            registrant_name=pre.name,
            email=f"{pre.mobile_number}@{PLACEHOLDER_EMAIL_DOMAIN}",
            phone_number=pre.mobile_number,
            group_id=group_id,
            status=CompanyStatus.APPROVED,
            approved_at=utcnow(),
            pre_registration_id=pre.id,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(company)
        except IntegrityError as e:
            # The pre-registration still stands; a later resubmission retries
            logger.warning(
                f"Company for pre-registration {pre.id} not created, duplicate "
                f"code {pre.code or '-'}: {e.orig}"
            )
            return None

        if group_id is not None:
            await self._admit(group_id, company.id)
        return company

    # ------------------------------------------------------------------
    # Full registration
    # ------------------------------------------------------------------

    async def _registry_code(self, data: CompanyRegistration) -> str:
        """The registry code for the company name, or "" while codes are disabled."""
        if not await ScheduleService(self.db).codes_active():
            return ""
        entry = await lookup_by_name(self.db, data.name)
        if entry is None:
            raise ValidationError(
                "No company code is registered for this company name",
                errors=[{"field": "name", "message": "Company name not found in the code registry"}],
            )
        return entry.code

    async def register_company(self, data: CompanyRegistration) -> CompanyRegistrationResult:
        try:
            code = await self._registry_code(data)
            if data.group_id is not None:
                await capacity.ensure_admissible(self.db, data.group_id)
            result = await self._reconcile_company(data, code)
            await self.db.commit()
        except RegistrarException as e:
            await self.db.rollback()
            track_registration("company", e.code.name.lower())
            raise

        outcome = "created" if result.created else "updated"
        track_registration("company", outcome)
        logger.info(f"Company registration {outcome}: {result.company.id}")
        return result

    def _merge_registration(self, company: Company, data: CompanyRegistration) -> None:
        """Update a pre-registered company in place. Registrant, group and code are kept."""
        company.name = data.name
        company.email = data.email or ""
        company.phone_number = data.phone_number
        company.address = data.address
        for field_name in REGISTRATION_MERGE_FIELDS:
            value = getattr(data, field_name)
            if value:
                setattr(company, field_name, value)

    async def _reconcile_company(self, data: CompanyRegistration, code: str) -> CompanyRegistrationResult:
        existing = await self._find_company(data.name, code)
        if existing is not None:
            if existing.pre_registration_id is None:
                raise AlreadyRegisteredError(
                    "A company with this name and code has already been registered."
                    if code
                    else "A company with this name has already been registered."
                )
            self._merge_registration(existing, data)
            await self.db.flush()
            return CompanyRegistrationResult(company=existing, created=False)

        if code and await self._find_company_by_code(code) is not None:
            raise AlreadyRegisteredError()

        company = Company(
            name=data.name,
            code=code,
            email=data.email or "",
            phone_number=data.phone_number,
            address=data.address,
            logo=data.logo or "",
            description=data.description or "",
            business_type=data.business_type or "",
            registration_number=data.registration_number or "",
            tax_id=data.tax_id or "",
            website=data.website or "",
            registration_fee=data.registration_fee or 0,
            group_id=data.group_id,
            status=CompanyStatus.APPROVED,
            approved_at=utcnow(),
        )
        try:
            async with self.db.begin_nested():
                self.db.add(company)
        except IntegrityError:
            raise AlreadyRegisteredError()

        if data.group_id is not None:
            await self._admit(data.group_id, company.id)
        return CompanyRegistrationResult(company=company, created=True)
