"""
Repository for CalculatedEmission database operations.

Also provides the facility/period roll-up queries used by the aggregator.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, NamedTuple, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import (
    ActivityDataDBModel,
    CalculatedEmissionDBModel,
    EmissionFactorDBModel,
)


class FacilityPeriodKey(NamedTuple):
    facility_id: UUID
    reporting_period_start: date
    reporting_period_end: date


class ScopeTotal(NamedTuple):
    scope: str
    total_co2e: Decimal
    activity_count: int


class CalculatedEmissionRepository(BaseRepository[CalculatedEmissionDBModel]):
    """Repository for calculated emission operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(CalculatedEmissionDBModel, session)

    def _keyed_select(self, *columns):
        activity = ActivityDataDBModel
        return (
            select(*columns)
            .select_from(self.model)
            .join(activity, activity.id == self.model.activity_data_id)
            .where(
                activity.facility_id.is_not(None),
                activity.reporting_period_start.is_not(None),
                activity.reporting_period_end.is_not(None),
            )
        )

    async def get_keys_for_activities(
        self, activity_ids: Sequence[UUID]
    ) -> List[FacilityPeriodKey]:
        """
        Get the distinct facility/period keys of the given activities.

        Activities without a facility or a full reporting period are skipped.
        """
        if not activity_ids:
            return []
        activity = ActivityDataDBModel
        stmt = (
            self._keyed_select(
                activity.facility_id,
                activity.reporting_period_start,
                activity.reporting_period_end,
            )
            .where(activity.id.in_(list(activity_ids)))
            .distinct()
        )
        result = await self.session.execute(stmt)
        return [FacilityPeriodKey(*row) for row in result.all()]

    async def get_latest_calculation_per_key(
        self, organization_id: UUID
    ) -> dict[FacilityPeriodKey, datetime]:
        """
        Get the newest calculation timestamp for every facility/period key.

        Used to find aggregates that are missing or older than their data.
        """
        activity = ActivityDataDBModel
        stmt = (
            self._keyed_select(
                activity.facility_id,
                activity.reporting_period_start,
                activity.reporting_period_end,
                func.max(self.model.created_at),
            )
            .where(self.model.organization_id == organization_id)
            .group_by(
                activity.facility_id,
                activity.reporting_period_start,
                activity.reporting_period_end,
            )
        )
        result = await self.session.execute(stmt)
        return {FacilityPeriodKey(*row[:3]): row[3] for row in result.all()}

    async def get_scope_totals_for_key(
        self, organization_id: UUID, key: FacilityPeriodKey
    ) -> List[ScopeTotal]:
        """
        Sum all calculations on record for one facility/period, per scope.
        """
        activity = ActivityDataDBModel
        stmt = (
            self._keyed_select(
                self.model.scope,
                func.sum(self.model.calculated_value_co2e),
                func.count(self.model.id),
            )
            .where(
                self.model.organization_id == organization_id,
                activity.facility_id == key.facility_id,
                activity.reporting_period_start == key.reporting_period_start,
                activity.reporting_period_end == key.reporting_period_end,
            )
            .group_by(self.model.scope)
        )
        result = await self.session.execute(stmt)
        return [
            ScopeTotal(scope, Decimal(str(total or 0)), count)
            for scope, total, count in result.all()
        ]

    async def get_factor_years_for_key(
        self, organization_id: UUID, key: FacilityPeriodKey
    ) -> List[int]:
        """Distinct factor years used by the calculations of one key."""
        activity = ActivityDataDBModel
        stmt = (
            self._keyed_select(EmissionFactorDBModel.factor_year)
            .join(
                EmissionFactorDBModel,
                EmissionFactorDBModel.id == self.model.emissions_factor_id,
            )
            .where(
                self.model.organization_id == organization_id,
                activity.facility_id == key.facility_id,
                activity.reporting_period_start == key.reporting_period_start,
                activity.reporting_period_end == key.reporting_period_end,
            )
            .distinct()
        )
        result = await self.session.execute(stmt)
        return sorted(result.scalars().all())
