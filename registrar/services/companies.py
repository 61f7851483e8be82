"""Company administration."""

from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.database import utcnow
from registrar.exceptions import ConflictError, NotFoundError
from registrar.models.company import Company, CompanyStatus
from registrar.schemas.company import CompanyPaymentFlags, CompanyUpdate, PublicQueueEntry
from registrar.services.capacity import release_membership

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_companies(self, include_unapproved: bool = False) -> List[Company]:
        query = select(Company).order_by(Company.created_at.desc())
        if not include_unapproved:
            query = query.where(Company.status == CompanyStatus.APPROVED)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def public_queue(self) -> List[PublicQueueEntry]:
        """Approved companies in registration order, public fields only."""
        result = await self.db.execute(
            select(Company.name, Company.registrant_name, Company.paid, Company.created_at)
            .where(Company.status == CompanyStatus.APPROVED)
            .order_by(Company.created_at.asc())
        )
        return [
            PublicQueueEntry(
                name=name or "",
                user_name=registrant_name or "",
                paid=bool(paid),
                created_at=created_at,
            )
            for name, registrant_name, paid, created_at in result.all()
        ]

    async def get_company(self, company_id: UUID, include_unapproved: bool = False) -> Company:
        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", str(company_id))
        # Unapproved companies are invisible to the public
        if not include_unapproved and company.status != CompanyStatus.APPROVED:
            raise NotFoundError("Company", str(company_id))
        return company

    async def update_company(self, company_id: UUID, data: CompanyUpdate) -> Company:
        company = await self.get_company(company_id, include_unapproved=True)
        update_data = data.model_dump(exclude_unset=True)
        for field_name, value in update_data.items():
            if value is None:
                continue
            setattr(company, field_name, value)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Another company already uses this name and code")
        logger.info(f"Company updated: {company_id} fields={sorted(update_data)}")
        return company

    async def approve_company(self, company_id: UUID) -> Company:
        company = await self.get_company(company_id, include_unapproved=True)
        company.status = CompanyStatus.APPROVED
        company.approved_at = utcnow()
        await self.db.commit()
        logger.info(f"Company approved: {company_id}")
        return company

    async def reject_company(self, company_id: UUID, reason: Optional[str] = "") -> Company:
        company = await self.get_company(company_id, include_unapproved=True)
        company.status = CompanyStatus.REJECTED
        company.rejection_reason = reason or ""
        company.rejected_at = utcnow()
        await self.db.commit()
        logger.info(f"Company rejected: {company_id}")
        return company

    async def update_payment_flags(self, company_id: UUID, flags: CompanyPaymentFlags) -> Company:
        company = await self.get_company(company_id, include_unapproved=True)
        if flags.spent is not None:
            company.spent = flags.spent
        if flags.paid is not None:
            company.paid = flags.paid
        await self.db.commit()
        logger.info(f"Company {company_id} status: spent={company.spent} paid={company.paid}")
        return company

    async def delete_company(self, company_id: UUID) -> None:
        company = await self.get_company(company_id, include_unapproved=True)
        await release_membership(self.db, company.id)
        await self.db.delete(company)
        await self.db.commit()
        logger.info(f"Company deleted: {company_id}")
