"""
Facility emissions aggregation.

Rolls calculated emissions up to (facility, reporting period) totals. Each
aggregate is recomputed from every calculation on record for its key and
overwritten, so it always equals the current sum regardless of earlier runs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import (
    CalculatedEmissionRepository,
    FacilityEmissionsAggregateRepository,
    FacilityPeriodKey,
)
from app.database.schemas import FacilityEmissionsAggregateDBModel
from app.utils.constants import Scope

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    aggregated: list[FacilityPeriodKey] = field(default_factory=list)
    failed: list[FacilityPeriodKey] = field(default_factory=list)


class FacilityAggregator:
    """
    Service for maintaining facility/period aggregates.

    Every key is written in its own transaction. A failing key is rolled back,
    logged as a warning and skipped; aggregates are a rebuildable view and the
    calculations remain the source of truth.
    """

    def __init__(self, session: AsyncSession, calculation_method: str = "primary_verified_bills"):
        self.session = session
        self.calculation_method = calculation_method
        self.calculations = CalculatedEmissionRepository(session)
        self.aggregates = FacilityEmissionsAggregateRepository(session)

    async def find_stale_keys(self, organization_id: UUID) -> set[FacilityPeriodKey]:
        """
        Keys whose aggregate is missing or older than their newest calculation.

        Picks up aggregation work left undone by an interrupted run.
        """
        latest_calculation = await self.calculations.get_latest_calculation_per_key(
            organization_id
        )
        calculated_at = await self.aggregates.get_calculated_at_per_key(organization_id)

        return {
            key
            for key, newest in latest_calculation.items()
            if key not in calculated_at or calculated_at[key] < newest
        }

    async def aggregate(
        self, organization_id: UUID, activity_ids: Sequence[UUID] = ()
    ) -> AggregationResult:
        """
        Recompute aggregates touched by a batch plus any stale ones.

        Args:
            organization_id: Owning organization
            activity_ids: Activities calculated in this batch

        Returns:
            Keys aggregated and keys that failed
        """
        result = AggregationResult()
        try:
            keys = set(await self.calculations.get_keys_for_activities(activity_ids))
            keys |= await self.find_stale_keys(organization_id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(
                f"Failed to collect facility aggregates for organization {organization_id}: {e}"
            )
            return result

        if not keys:
            logger.info(f"No facility aggregates to update for organization {organization_id}")
            return result

        for key in sorted(keys):
            try:
                await self._aggregate_key(organization_id, key)
                await self.session.commit()
                result.aggregated.append(key)
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.warning(
                    f"Failed to aggregate facility {key.facility_id} for "
                    f"{key.reporting_period_start}..{key.reporting_period_end}: {e}"
                )
                result.failed.append(key)

        logger.info(
            f"Aggregated {len(result.aggregated)} facility periods for organization "
            f"{organization_id} ({len(result.failed)} failed)"
        )
        return result

    async def _aggregate_key(
        self, organization_id: UUID, key: FacilityPeriodKey
    ) -> FacilityEmissionsAggregateDBModel:
        totals = await self.calculations.get_scope_totals_for_key(organization_id, key)
        factor_years = await self.calculations.get_factor_years_for_key(organization_id, key)

        by_scope = {scope_total.scope: scope_total.total_co2e for scope_total in totals}
        scope1 = by_scope.get(Scope.SCOPE_1, Decimal("0"))
        scope2 = by_scope.get(Scope.SCOPE_2, Decimal("0"))
        total = sum((scope_total.total_co2e for scope_total in totals), Decimal("0"))
        activity_count = sum(scope_total.activity_count for scope_total in totals)

        now = datetime.utcnow()
        values = {
            "total_co2e": total,
            "scope1_co2e": scope1,
            "scope2_co2e": scope2,
            "activity_count": activity_count,
            "calculation_method": self.calculation_method,
            "calculated_at": now,
            "results_payload": {
                "method": self.calculation_method,
                "activity_count": activity_count,
                "status": "calculated",
                "calculation_date": now.isoformat(),
                "factor_years": factor_years,
                "scope_breakdown": {"scope1": str(scope1), "scope2": str(scope2)},
            },
        }

        aggregate = await self.aggregates.get_by_key(organization_id, key)
        if aggregate is None:
            aggregate = FacilityEmissionsAggregateDBModel(
                organization_id=organization_id,
                facility_id=key.facility_id,
                reporting_period_start=key.reporting_period_start,
                reporting_period_end=key.reporting_period_end,
                **values,
            )
            self.session.add(aggregate)
        else:
            for name, value in values.items():
                setattr(aggregate, name, value)

        await self.session.flush()
        logger.debug(
            f"Facility {key.facility_id} {key.reporting_period_start}..{key.reporting_period_end}: "
            f"{total} kgCO2e from {activity_count} activities"
        )
        return aggregate
