"""Pre-registration lookups and administration."""

from typing import List
from uuid import UUID
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.exceptions import ConflictError, NotFoundError
from registrar.models.company import Company
from registrar.models.pre_registration import PreRegistration
from registrar.schemas.pre_registration import PublicPreRegistration

logger = logging.getLogger(__name__)


class PreRegistrationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_pre_registration(self, pre_registration_id: UUID) -> PreRegistration:
        pre = await self.db.get(PreRegistration, pre_registration_id)
        if pre is None:
            raise NotFoundError("Pre-registration", str(pre_registration_id))
        return pre

    async def verify(self, mobile_number: str, code: str) -> PreRegistration:
        result = await self.db.execute(
            select(PreRegistration)
            .where(PreRegistration.mobile_number == mobile_number, PreRegistration.code == code)
            .order_by(PreRegistration.created_at.desc())
            .limit(1)
        )
        pre = result.scalar_one_or_none()
        if pre is None:
            raise NotFoundError("Pre-registration for this mobile number and code")
        return pre

    async def list_pre_registrations(self) -> List[PreRegistration]:
        result = await self.db.execute(
            select(PreRegistration).order_by(PreRegistration.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_public(self) -> List[PublicPreRegistration]:
        return [
            PublicPreRegistration(
                id=pre.id,
                name=pre.company_name,
                mobile_number=pre.mobile_number,
                contact_name=pre.name,
            )
            for pre in await self.list_pre_registrations()
        ]

    async def delete_pre_registration(self, pre_registration_id: UUID) -> None:
        pre = await self.get_pre_registration(pre_registration_id)
        linked = await self.db.execute(
            select(Company.id).where(Company.pre_registration_id == pre.id)
        )
        if linked.first() is not None:
            raise ConflictError("Pre-registration has a linked company; delete the company first")
        await self.db.delete(pre)
        await self.db.commit()
        logger.info(f"Pre-registration deleted: {pre_registration_id}")
