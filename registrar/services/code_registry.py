"""Code Registry - the company-name directory and its 4-digit codes.

Codes disambiguate same-named companies and pre-fill registration forms.
The unique index on ``company_names.code`` is the authoritative gate; the
lookups here only keep the common path from hitting it.
"""

import secrets
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.config import settings
from registrar.exceptions import (
    ConflictError,
    DuplicateCodeError,
    NotFoundError,
    RegistryExhaustedError,
    ValidationError,
)
from registrar.models.company import Company
from registrar.models.company_name import CompanyName
from registrar.models.pre_registration import PreRegistration
from registrar.schemas.company_name import (
    CompanyNameCreate,
    CompanyNameImportItem,
    CompanyNameUpdate,
    ImportResult,
    UnregisteredCompanyName,
)
from registrar.schemas.pre_registration import CodeAutofill
from registrar.utils.normalization import is_valid_code, normalize_name

logger = logging.getLogger(__name__)

CODE_MIN = 1000
CODE_MAX = 9999

# Bounded retries when a freshly generated code loses an insert race
INSERT_RETRIES = 3


def _random_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


async def lookup_by_code(db: AsyncSession, code: str) -> Optional[CompanyName]:
    if not code:
        return None
    result = await db.execute(select(CompanyName).where(CompanyName.code == code.strip()))
    return result.scalar_one_or_none()


async def lookup_by_name(db: AsyncSession, name: str) -> Optional[CompanyName]:
    if not name or not name.strip():
        return None
    result = await db.execute(select(CompanyName).where(CompanyName.name == name.strip()))
    return result.scalar_one_or_none()


async def generate_unique_code(db: AsyncSession, max_attempts: Optional[int] = None) -> str:
    """Pick a random unused 4-digit code.

    Raises RegistryExhaustedError when every attempt collides; the caller
    may retry the whole operation.
    """
    attempts = max_attempts or settings.CODE_GENERATION_MAX_ATTEMPTS
    for _ in range(attempts):
        code = _random_code()
        if await lookup_by_code(db, code) is None:
            return code
    logger.error(f"Code generation exhausted after {attempts} attempts")
    raise RegistryExhaustedError(attempts)


async def validate_code(db: AsyncSession, code: str, exclude_id: Optional[UUID] = None) -> str:
    """Check format and availability. Returns the trimmed code."""
    code = _clean(code)
    if not is_valid_code(code):
        raise ValidationError(
            "Code must be exactly 4 digits",
            errors=[{"field": "code", "message": "Code must be exactly 4 digits"}],
        )
    existing = await lookup_by_code(db, code)
    if existing is not None and existing.id != exclude_id:
        raise DuplicateCodeError(code, "Code already exists for another company")
    return code


async def resolve_autofill(db: AsyncSession, code: str) -> CodeAutofill:
    """Registration form data for a code: the directory first, then pre-registrations."""
    code = _clean(code)
    if not code:
        raise ValidationError("Code is required")

    entry = await lookup_by_code(db, code)
    if entry is not None:
        return CodeAutofill(
            code=entry.code,
            name=entry.contact_name or "",
            mobile_number=entry.mobile_number or "",
            company_name=entry.name,
        )

    result = await db.execute(
        select(PreRegistration)
        .where(PreRegistration.code == code)
        .order_by(PreRegistration.created_at.desc())
        .limit(1)
    )
    pre_registration = result.scalar_one_or_none()
    if pre_registration is None:
        raise NotFoundError("Company code")
    return CodeAutofill(
        code=pre_registration.code,
        name=pre_registration.name,
        mobile_number=pre_registration.mobile_number,
        company_name=pre_registration.company_name,
    )


class CodeRegistry:
    """Administration of the company-name directory."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_entry(self, entry_id: UUID) -> CompanyName:
        entry = await self.db.get(CompanyName, entry_id)
        if entry is None:
            raise NotFoundError("Company name", str(entry_id))
        return entry

    async def list_entries(self, order_by_name: bool = False) -> List[CompanyName]:
        order = CompanyName.name.asc() if order_by_name else CompanyName.created_at.desc()
        result = await self.db.execute(select(CompanyName).order_by(order))
        return list(result.scalars().all())

    async def list_unregistered(self) -> List[UnregisteredCompanyName]:
        """Entries with no company or pre-registration matching by code or name."""
        entries = await self.list_entries(order_by_name=True)

        company_rows = (await self.db.execute(select(Company.name, Company.code))).all()
        pre_rows = (
            await self.db.execute(select(PreRegistration.company_name, PreRegistration.code))
        ).all()

        taken_codes = {code for _, code in company_rows if code} | {
            code for _, code in pre_rows if code
        }
        taken_names = {normalize_name(name) for name, _ in company_rows if name} | {
            normalize_name(name) for name, _ in pre_rows if name
        }

        unregistered = []
        for entry in entries:
            if entry.code and entry.code.strip() in taken_codes:
                continue
            if normalize_name(entry.name) in taken_names:
                continue
            unregistered.append(UnregisteredCompanyName.model_validate(entry))
        return unregistered

    async def create_entry(self, data: CompanyNameCreate) -> CompanyName:
        if await lookup_by_name(self.db, data.name) is not None:
            raise ConflictError("Company name already exists")

        for attempt in range(INSERT_RETRIES):
            entry = CompanyName(
                name=data.name,
                contact_name=data.contact_name,
                mobile_number=data.mobile_number,
                notes=data.notes or "",
                code=await generate_unique_code(self.db),
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(entry)
            except IntegrityError:
                if await lookup_by_name(self.db, data.name) is not None:
                    raise ConflictError("Company name already exists")
                logger.info(f"Generated code collided on insert, retrying (attempt {attempt + 1})")
                continue
            await self.db.commit()
            logger.info(f"Company name created: {entry.name} ({entry.code})")
            return entry

        raise RegistryExhaustedError(INSERT_RETRIES)

    async def update_entry(self, entry_id: UUID, data: CompanyNameUpdate) -> CompanyName:
        entry = await self.get_entry(entry_id)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("name"):
            clash = await lookup_by_name(self.db, update_data["name"])
            if clash is not None and clash.id != entry.id:
                raise ConflictError("Company name already exists")

        if "code" in update_data:
            if update_data["code"]:
                update_data["code"] = await validate_code(
                    self.db, update_data["code"], exclude_id=entry.id
                )
            else:
                update_data["code"] = await generate_unique_code(self.db)

        for field_name, value in update_data.items():
            if value is None:
                continue
            setattr(entry, field_name, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateCodeError(update_data.get("code", ""), "Code or name already in use")

        logger.info(f"Company name updated: {entry_id}")
        return entry

    async def delete_entry(self, entry_id: UUID) -> None:
        entry = await self.get_entry(entry_id)
        await self.db.delete(entry)
        await self.db.commit()
        logger.info(f"Company name deleted: {entry_id}")

    async def delete_all(self) -> int:
        result = await self.db.execute(delete(CompanyName))
        await self.db.commit()
        logger.info(f"Deleted all company names ({result.rowcount})")
        return result.rowcount

    async def _import_code(self, supplied) -> str:
        code = _clean(supplied)
        if is_valid_code(code) and await lookup_by_code(self.db, code) is None:
            return code
        return await generate_unique_code(self.db)

    async def import_entries(self, items: Iterable[CompanyNameImportItem]) -> ImportResult:
        """
        Import a batch of directory entries.

        Each line stands alone: an empty name is an error line, an existing
        name is skipped, and a missing, malformed or taken code is replaced
        by a generated one. A failing line never aborts the batch.
        """
        items = list(items)
        imported_ids = []
        skipped = []
        errors = []

        for index, item in enumerate(items):
            name = _clean(item.name)
            if not name:
                errors.append({"row": index + 1, "company": item.model_dump(), "error": "Empty name"})
                continue

            if await lookup_by_name(self.db, name) is not None:
                skipped.append({"row": index + 1, "name": name, "reason": "Already exists"})
                continue

            entry = CompanyName(
                name=name,
                contact_name=_clean(item.contact_name),
                mobile_number=_clean(item.mobile_number),
                notes=_clean(item.notes),
                code=await self._import_code(item.code),
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(entry)
            except IntegrityError as e:
                logger.warning(f"Import row {index + 1} rejected: {e.orig}")
                errors.append({"row": index + 1, "company": item.model_dump(), "error": "Duplicate entry"})
                continue
            imported_ids.append(entry.id)

        await self.db.commit()
        logger.info(
            f"Company name import: {len(imported_ids)} imported, "
            f"{len(skipped)} skipped, {len(errors)} errors"
        )
        return ImportResult(
            success=True,
            total_rows=len(items),
            imported=len(imported_ids),
            skipped=len(skipped),
            errors=len(errors),
            imported_ids=imported_ids,
            skipped_details=skipped,
            error_details=errors,
        )
