"""
Repository for FacilityEmissionsAggregate database operations.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.repositories.calculated_emission import FacilityPeriodKey
from app.database.schemas import FacilityEmissionsAggregateDBModel


class FacilityEmissionsAggregateRepository(
    BaseRepository[FacilityEmissionsAggregateDBModel]
):
    """Repository for facility aggregate operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(FacilityEmissionsAggregateDBModel, session)

    async def get_by_key(
        self, organization_id: UUID, key: FacilityPeriodKey
    ) -> Optional[FacilityEmissionsAggregateDBModel]:
        stmt = select(self.model).where(
            self.model.organization_id == organization_id,
            self.model.facility_id == key.facility_id,
            self.model.reporting_period_start == key.reporting_period_start,
            self.model.reporting_period_end == key.reporting_period_end,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_organization(
        self,
        organization_id: UUID,
        facility_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[FacilityEmissionsAggregateDBModel]:
        """
        List aggregates of an organization.

        Args:
            organization_id: Owning organization
            facility_id: Optional facility filter
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Aggregates ordered by facility and period
        """
        stmt = select(self.model).where(self.model.organization_id == organization_id)
        if facility_id is not None:
            stmt = stmt.where(self.model.facility_id == facility_id)

        stmt = (
            stmt.order_by(self.model.facility_id, self.model.reporting_period_start)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_calculated_at_per_key(
        self, organization_id: UUID
    ) -> dict[FacilityPeriodKey, datetime]:
        """Get when each existing aggregate of an organization was last computed."""
        stmt = select(
            self.model.facility_id,
            self.model.reporting_period_start,
            self.model.reporting_period_end,
            self.model.calculated_at,
        ).where(self.model.organization_id == organization_id)
        result = await self.session.execute(stmt)
        return {FacilityPeriodKey(*row[:3]): row[3] for row in result.all()}
