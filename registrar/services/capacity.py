"""
Capacity Tracker - per-group slot accounting.

Admission is a single conditional UPDATE: the capacity check and the
increment happen in one statement, so concurrent admissions at the last
slot cannot overshoot ``max_companies``. Groups created before the counter
existed carry ``registered_count = NULL`` and are counted from their
memberships.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.database import utcnow
from registrar.exceptions import GroupClosedError, GroupFullError, GroupNotFoundError
from registrar.models.company import Company
from registrar.models.group import Group, GroupMembership
from registrar.schemas.group import GroupAuditEntry, GroupAuditReport

logger = logging.getLogger(__name__)


@dataclass
class Admission:
    group_id: UUID
    company_id: UUID
    registered_count: int
    is_closed: bool


def _membership_count():
    return (
        select(func.count(GroupMembership.id))
        .where(GroupMembership.group_id == Group.id)
        .scalar_subquery()
    )


def _current_count():
    """SQL expression for a group's effective registered count."""
    return func.coalesce(Group.registered_count, _membership_count())


def closed_for(registered: int, max_companies: int) -> bool:
    return max_companies > 0 and registered >= max_companies


async def membership_count(db: AsyncSession, group_id: UUID) -> int:
    result = await db.execute(
        select(func.count(GroupMembership.id)).where(GroupMembership.group_id == group_id)
    )
    return result.scalar_one()


async def effective_count(db: AsyncSession, group: Group) -> int:
    if group.registered_count is not None:
        return group.registered_count
    return await membership_count(db, group.id)


async def company_ids_for(db: AsyncSession, group_ids: List[UUID]) -> Dict[UUID, List[UUID]]:
    """Admitted company ids per group, in admission order."""
    members: Dict[UUID, List[UUID]] = {group_id: [] for group_id in group_ids}
    if not group_ids:
        return members
    result = await db.execute(
        select(GroupMembership.group_id, GroupMembership.company_id)
        .where(GroupMembership.group_id.in_(group_ids))
        .order_by(GroupMembership.id)
    )
    for group_id, company_id in result.all():
        members[group_id].append(company_id)
    return members


async def get_group(db: AsyncSession, group_id: UUID) -> Group:
    result = await db.execute(
        select(Group).where(Group.id == group_id).execution_options(populate_existing=True)
    )
    group = result.scalar_one_or_none()
    if group is None:
        raise GroupNotFoundError(group_id)
    return group


async def ensure_admissible(db: AsyncSession, group_id: UUID) -> Group:
    """Pre-check a group before any registration state is touched."""
    group = await get_group(db, group_id)
    if closed_for(await effective_count(db, group), group.max_companies):
        raise GroupFullError(group_id)
    if group.is_closed:
        raise GroupClosedError(group_id)
    return group


async def admit(db: AsyncSession, group_id: UUID, company_id: UUID) -> Admission:
    """
    Take one slot in ``group_id`` for ``company_id``.

    Runs inside the caller's transaction and does not commit. Raises
    GroupNotFoundError, GroupClosedError or GroupFullError when no slot
    was taken.
    """
    current = _current_count()
    result = await db.execute(
        update(Group)
        .where(
            Group.id == group_id,
            Group.is_closed.is_(False),
            or_(Group.max_companies == 0, current < Group.max_companies),
        )
        .values(
            registered_count=current + 1,
            is_closed=case(
                (and_(Group.max_companies > 0, current + 1 >= Group.max_companies), True),
                else_=False,
            ),
            updated_at=utcnow(),
        )
        .returning(Group.registered_count, Group.is_closed)
        .execution_options(synchronize_session=False)
    )
    row = result.first()

    if row is None:
        group = await get_group(db, group_id)
        if closed_for(await effective_count(db, group), group.max_companies):
            raise GroupFullError(group_id)
        raise GroupClosedError(group_id)

    db.add(GroupMembership(group_id=group_id, company_id=company_id))
    await db.flush()

    registered_count, is_closed = row
    logger.info(
        f"Admitted company {company_id} to group {group_id} "
        f"({registered_count} registered, closed={bool(is_closed)})"
    )
    return Admission(
        group_id=group_id,
        company_id=company_id,
        registered_count=registered_count,
        is_closed=bool(is_closed),
    )


async def recompute_closed(
    db: AsyncSession,
    group: Group,
    new_max_companies: Optional[int] = None,
    manual_close: Optional[bool] = None,
) -> bool:
    """
    Re-evaluate ``is_closed`` after an admin edit.

    The counter is never decremented; a legacy NULL counter is backfilled
    from memberships. An explicit manual close keeps the group closed even
    when it has free slots.
    """
    registered = await effective_count(db, group)
    if group.registered_count is None:
        group.registered_count = registered
    if new_max_companies is not None:
        group.max_companies = new_max_companies
    group.is_closed = closed_for(registered, group.max_companies) or bool(manual_close)
    return group.is_closed


async def release_membership(db: AsyncSession, company_id: UUID) -> None:
    """Drop a company's membership rows. Counters are left for the audit to report."""
    await db.execute(delete(GroupMembership).where(GroupMembership.company_id == company_id))


async def audit_groups(db: AsyncSession, repair: bool = False) -> GroupAuditReport:
    """
    Compare every group's counter with its memberships.

    Companies that point at a group without a membership row (a swallowed
    bookkeeping failure) count as missing memberships. With ``repair`` the
    missing rows are added, the counter is rewritten from the memberships
    and the closed flag recomputed.
    """
    result = await db.execute(
        select(Group).order_by(Group.created_at).execution_options(populate_existing=True)
    )
    groups = list(result.scalars().all())
    entries = []
    drifted = 0
    repaired = 0

    for group in groups:
        members = set(
            (
                await db.execute(
                    select(GroupMembership.company_id).where(GroupMembership.group_id == group.id)
                )
            ).scalars().all()
        )
        pointing = set(
            (await db.execute(select(Company.id).where(Company.group_id == group.id))).scalars().all()
        )
        orphaned = pointing - members
        actual = len(members) + len(orphaned)
        recorded = group.registered_count if group.registered_count is not None else len(members)

        entry = GroupAuditEntry(
            group_id=group.id,
            name=group.name,
            recorded_count=recorded,
            actual_count=actual,
            drift=recorded - actual,
            is_closed=group.is_closed,
        )

        if entry.drift != 0 or group.registered_count is None:
            if entry.drift != 0:
                drifted += 1
                logger.warning(
                    f"Group {group.id} counter drift: recorded {recorded}, actual {actual}"
                )
            if repair:
                for company_id in orphaned:
                    db.add(GroupMembership(group_id=group.id, company_id=company_id))
                group.registered_count = actual
                group.is_closed = closed_for(actual, group.max_companies)
                entry.is_closed = group.is_closed
                entry.repaired = True
                repaired += 1

        entries.append(entry)

    if repair and repaired:
        await db.commit()
        logger.info(f"Group audit repaired {repaired} group(s)")

    return GroupAuditReport(checked=len(groups), drifted=drifted, repaired=repaired, groups=entries)
