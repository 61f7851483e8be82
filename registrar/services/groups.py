"""Group administration."""

from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.exceptions import ConflictError
from registrar.models.company import Company
from registrar.models.group import Group, GroupMembership
from registrar.schemas.group import GroupCreate, GroupResponse, GroupUpdate
from registrar.services import capacity

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _responses(self, groups: List[Group]) -> List[GroupResponse]:
        members = await capacity.company_ids_for(self.db, [group.id for group in groups])
        return [GroupResponse.from_group(group, members[group.id]) for group in groups]

    async def _all(self) -> List[Group]:
        result = await self.db.execute(
            select(Group)
            .order_by(Group.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_groups(self) -> List[GroupResponse]:
        return await self._responses(await self._all())

    async def list_available_groups(self) -> List[GroupResponse]:
        """Groups still accepting registrations."""
        responses = await self.list_groups()
        return [
            group
            for group in responses
            if not group.is_closed
            and (group.max_companies == 0 or group.registered_count < group.max_companies)
        ]

    async def get_group(self, group_id: UUID) -> GroupResponse:
        group = await capacity.get_group(self.db, group_id)
        return (await self._responses([group]))[0]

    async def _name_taken(self, name: str, exclude_id: Optional[UUID] = None) -> bool:
        query = select(Group.id).where(Group.name == name)
        if exclude_id is not None:
            query = query.where(Group.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def create_group(self, data: GroupCreate) -> GroupResponse:
        if await self._name_taken(data.name):
            raise ConflictError("A group with this name already exists")
        group = Group(
            name=data.name,
            time_from=data.time_from,
            time_to=data.time_to,
            date=data.date,
            day=data.day or "",
            max_companies=data.max_companies,
            registered_count=0,
            is_closed=False,
        )
        self.db.add(group)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A group with this name already exists")
        logger.info(f"Group created: {group.id} ({group.name})")
        return GroupResponse.from_group(group, [])

    async def update_group(self, group_id: UUID, data: GroupUpdate) -> GroupResponse:
        group = await capacity.get_group(self.db, group_id)
        update_data = data.model_dump(exclude_unset=True)
        manual_close = update_data.pop("is_closed", None)
        new_max = update_data.pop("max_companies", None)

        name = update_data.get("name")
        if name is not None:
            name = name.strip()
            if not name:
                update_data.pop("name")
            elif await self._name_taken(name, exclude_id=group.id):
                raise ConflictError("A group with this name already exists")
            else:
                update_data["name"] = name

        for field_name, value in update_data.items():
            if value is None:
                continue
            setattr(group, field_name, value)
        await capacity.recompute_closed(self.db, group, new_max_companies=new_max, manual_close=manual_close)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A group with this name already exists")
        logger.info(f"Group updated: {group_id} closed={group.is_closed}")
        return await self.get_group(group_id)

    async def delete_group(self, group_id: UUID) -> None:
        group = await capacity.get_group(self.db, group_id)
        await self.db.execute(delete(GroupMembership).where(GroupMembership.group_id == group.id))
        await self.db.execute(
            update(Company)
            .where(Company.group_id == group.id)
            .values(group_id=None)
        )
        await self.db.delete(group)
        await self.db.commit()
        logger.info(f"Group deleted: {group_id}")
