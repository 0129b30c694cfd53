"""
Repository for OrganizationMember database operations.
"""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import OrganizationMemberDBModel


class OrganizationMemberRepository(BaseRepository[OrganizationMemberDBModel]):
    def __init__(self, session: AsyncSession):
        super().__init__(OrganizationMemberDBModel, session)

    async def is_member(self, organization_id: UUID, user_id: UUID) -> bool:
        stmt = select(self.model.id).where(
            self.model.organization_id == organization_id,
            self.model.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
