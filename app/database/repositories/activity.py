"""
Repository for ActivityData database operations.
"""
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import ActivityDataDBModel, CalculatedEmissionDBModel
from app.utils.constants import ActivityCategory


class ActivityRepository(BaseRepository[ActivityDataDBModel]):
    """Repository for activity data operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityDataDBModel, session)

    async def get_unprocessed_for_organization(
        self, organization_id: UUID
    ) -> List[ActivityDataDBModel]:
        """
        Get Scope 1 and Scope 2 activities that have no calculation yet.

        Args:
            organization_id: Owning organization

        Returns:
            Activities ordered by activity date, newest first
        """
        stmt = (
            select(self.model)
            .outerjoin(
                CalculatedEmissionDBModel,
                CalculatedEmissionDBModel.activity_data_id == self.model.id,
            )
            .where(
                self.model.organization_id == organization_id,
                self.model.category.in_(ActivityCategory.BATCH_CATEGORIES),
                CalculatedEmissionDBModel.id.is_(None),
            )
            .order_by(self.model.activity_date.desc().nulls_last(), self.model.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
