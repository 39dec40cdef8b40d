"""
Group Service

CRUD over bot groups.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.exceptions import BadRequestException, ConflictException, NotFoundException
from zyrotech.core.logging import get_logger
from zyrotech.models.bot import Bot
from zyrotech.models.group import Group

# Initialize logger
logger = get_logger(__name__)

GROUP_NAME_MIN_LENGTH = 2


class GroupService:
    """Service for managing bot groups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise BadRequestException("Group name is required", code="missing-group-name")
        if len(name) < GROUP_NAME_MIN_LENGTH:
            raise BadRequestException(
                "Group name must be at least 2 characters long",
                code="invalid-group-name"
            )
        return name

    async def _ensure_unique(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Group.id).where(Group.name == name)
        if exclude_id is not None:
            query = query.where(Group.id != exclude_id)
        if (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ConflictException("A group with this name already exists", code="group-name-exists")

    async def create_group(self, name: Optional[str]) -> Group:
        name = self._clean_name(name)
        await self._ensure_unique(name)

        group = Group(name=name)
        self.db.add(group)
        await self.db.commit()

        logger.info("Group created", extra={"group_id": str(group.id), "group_name": name})
        return group

    async def list_groups(self) -> List[Group]:
        result = await self.db.execute(select(Group).order_by(Group.name))
        return list(result.scalars().all())

    async def get_group(self, group_id: UUID) -> Group:
        group = await self.db.get(Group, group_id)
        if group is None:
            raise NotFoundException("Group not found", code="group-not-found")
        return group

    async def update_group(self, group_id: UUID, name: Optional[str]) -> Group:
        group = await self.get_group(group_id)
        name = self._clean_name(name)
        await self._ensure_unique(name, exclude_id=group.id)

        group.name = name
        await self.db.commit()
        logger.info("Group updated", extra={"group_id": str(group.id)})
        return group

    async def delete_group(self, group_id: UUID) -> None:
        """
        Raises:
            ConflictException: Bots still belong to the group
        """
        group = await self.get_group(group_id)
        bot_count = await self.db.scalar(
            select(func.count()).select_from(Bot).where(Bot.group_id == group.id)
        )
        if bot_count:
            raise ConflictException(
                f"Group is used by {bot_count} bot(s) and cannot be deleted",
                code="group-in-use"
            )

        await self.db.delete(group)
        await self.db.commit()
        logger.info("Group deleted", extra={"group_id": str(group_id)})
