"""
Scope 1 & 2 batch orchestrator.

Drives the pipeline for every not-yet-processed activity of an organization:
normalize -> map -> resolve factor -> unit check -> compute -> persist
calculation and audit log -> aggregate per facility -> summary.

Re-running the batch only picks up activities still lacking a calculation,
so a halted run is resumed by calling it again.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Union
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PersistenceError, ReferenceDataMissingError
from app.database.repositories import ActivityRepository, EmissionFactorRepository
from app.database.schemas import ActivityDataDBModel, CalculatedEmissionDBModel
from app.pydantic_models.calculation import (
    BatchDetails,
    Scope12BatchResponse,
    UnmatchedActivity,
)
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables
from app.services.aggregators.facility_aggregator import FacilityAggregator
from app.services.audit.calculation_logger import CalculationAuditLogger
from app.services.batch.organization_lock import OrganizationBatchLock
from app.services.calculators.emission_calculator import (
    EmissionCalculationEngine,
    EmissionCalculationError,
)
from app.services.calculators.fuel_type_mapper import FuelMapping, FuelTypeMapper
from app.services.calculators.unit_converter import NormalizedQuantity, UnitConverter
from app.services.selectors.factor_resolver import FactorResolution, FactorResolver
from app.utils.constants import CalculationType, OutputUnit, UnmatchedReason

logger = logging.getLogger(__name__)

NO_UNPROCESSED_MESSAGE = "No unprocessed Scope 1 or Scope 2 activity data found"
NO_FACTORS_MESSAGE = "No emissions factors found in database"


@dataclass(frozen=True)
class PlannedCalculation:
    """Everything needed to persist one activity's calculation."""

    activity: ActivityDataDBModel
    normalized: NormalizedQuantity
    mapping: FuelMapping
    resolution: FactorResolution
    calculated_value: Decimal


class Scope12BatchOrchestrator:
    """Entry point of the Scope 1 & 2 batch."""

    def __init__(
        self,
        session: AsyncSession,
        reference_tables: ReferenceTables,
        settings: EngineSettings,
    ):
        self.session = session
        self.settings = settings
        self.mapper = FuelTypeMapper(reference_tables, settings.fuzzy_match_threshold)
        self.audit_logger = CalculationAuditLogger(session)
        self.aggregator = FacilityAggregator(session, settings.aggregation_method)
        self.activities = ActivityRepository(session)
        self.factors = EmissionFactorRepository(session)

    async def run(self, organization_id: UUID, user_id: UUID) -> Scope12BatchResponse:
        """
        Run the batch for one organization under the organization lock.

        Raises:
            ConcurrentBatchError: If a batch is already running for the organization
            ReferenceDataMissingError: If no energy factors are loaded
            PersistenceError: If a calculation or its log cannot be written
        """
        async with OrganizationBatchLock(self.session.bind, organization_id):
            return await self._run(organization_id, user_id)

    async def _run(self, organization_id: UUID, user_id: UUID) -> Scope12BatchResponse:
        activities = await self.activities.get_unprocessed_for_organization(organization_id)
        logger.info(
            f"Found {len(activities)} unprocessed Scope 1/2 activities for organization {organization_id}"
        )

        if not activities:
            # Still aggregate: a previous run may have stopped before this step
            aggregation = await self.aggregator.aggregate(organization_id)
            return Scope12BatchResponse(
                success=True,
                message=NO_UNPROCESSED_MESSAGE,
                calculations_performed=0,
                logs_created=0,
                facilities_aggregated=len(aggregation.aggregated),
            )

        factors = await self.factors.get_energy_factors()
        if not factors:
            logger.error(NO_FACTORS_MESSAGE)
            raise ReferenceDataMissingError(NO_FACTORS_MESSAGE)

        resolver = FactorResolver(factors, self.settings.default_geographic_scope)
        calculated_ids: list[UUID] = []
        unmatched: list[UnmatchedActivity] = []

        for index, activity in enumerate(activities, start=1):
            plan = self.plan_calculation(activity, resolver)
            if isinstance(plan, UnmatchedActivity):
                logger.warning(
                    f"Activity {activity.id} ('{activity.name}') unmatched: {plan.reason}"
                )
                unmatched.append(plan)
                continue

            await self._persist(plan, organization_id, user_id, index, len(calculated_ids))
            calculated_ids.append(activity.id)

        aggregation = await self.aggregator.aggregate(organization_id, calculated_ids)

        matched = len(calculated_ids)
        message = f"Calculated emissions for {matched} of {len(activities)} activities"
        if unmatched:
            message += f"; {len(unmatched)} could not be matched"

        logger.info(f"{message} (organization {organization_id})")
        return Scope12BatchResponse(
            success=matched > 0,
            message=message,
            calculations_performed=matched,
            logs_created=matched,
            facilities_aggregated=len(aggregation.aggregated),
            unmatched_activities=len(unmatched),
            details=BatchDetails(
                total_unprocessed=len(activities),
                matched=matched,
                unmatched=len(unmatched),
                unmatched_list=unmatched,
            ),
        )

    def plan_calculation(
        self, activity: ActivityDataDBModel, resolver: FactorResolver
    ) -> Union[PlannedCalculation, UnmatchedActivity]:
        """
        Run the pure part of the pipeline for one activity.

        Returns:
            PlannedCalculation, or UnmatchedActivity with a readable reason
        """
        normalized = UnitConverter.normalize(activity.quantity, activity.unit)
        mapping = self.mapper.map(
            activity.fuel_type, activity.category, activity.name, normalized.unit
        )

        def unmatched(reason: UnmatchedReason, details: str) -> UnmatchedActivity:
            return UnmatchedActivity(
                activity_id=activity.id,
                name=activity.name,
                fuel_type=activity.fuel_type,
                resolved_fuel_type=mapping.fuel_type_key,
                unit=activity.unit,
                reason=reason.value,
                details=details,
            )

        target_year = FactorResolver.target_year_for(
            activity.reporting_period_end, activity.activity_date
        )
        resolution = resolver.resolve(mapping.fuel_type_key, target_year)
        if resolution is None:
            return unmatched(
                UnmatchedReason.NO_FACTOR,
                f"No emission factor for fuel type '{mapping.fuel_type_key}'",
            )

        factor = resolution.factor
        if not resolver.units_compatible(normalized.unit, factor):
            details = (
                f"Activity unit '{normalized.unit}' does not match factor unit "
                f"'{factor.factor_unit}'"
            )
            if normalized.warning:
                details += f" ({normalized.warning})"
            return unmatched(UnmatchedReason.UNIT_MISMATCH, details)

        try:
            value = EmissionCalculationEngine.calculate_quantity_based(
                normalized.quantity, factor.co2e_factor
            )
            value = EmissionCalculationEngine.to_storage_precision(value)
        except EmissionCalculationError as e:
            return unmatched(UnmatchedReason.INVALID_QUANTITY, e.message)

        return PlannedCalculation(activity, normalized, mapping, resolution, value)

    def _snapshot(self, plan: PlannedCalculation) -> dict:
        activity = plan.activity
        factor = plan.resolution.factor
        return {
            "calculation_type": CalculationType.SCOPE_1_2_BATCH,
            "activity": {
                "id": str(activity.id),
                "name": activity.name,
                "category": activity.category,
                "quantity": str(activity.quantity),
                "unit": activity.unit,
                "fuel_type": activity.fuel_type,
                "facility_id": str(activity.facility_id) if activity.facility_id else None,
                "reporting_period_start": activity.reporting_period_start,
                "reporting_period_end": activity.reporting_period_end,
                "activity_date": activity.activity_date,
            },
            "normalization": {
                **plan.normalized.to_snapshot(),
                "warning": plan.normalized.warning,
            },
            "mapping": {
                "fuel_type_key": plan.mapping.fuel_type_key,
                "scope": plan.mapping.scope,
                "method": plan.mapping.method,
                "confidence": plan.mapping.confidence,
            },
            "emissions_factor_used": {
                "factor_id": str(factor.id),
                "fuel_type": factor.fuel_type,
                "factor_year": factor.factor_year,
                "co2e_factor": str(factor.co2e_factor),
                "factor_unit": factor.factor_unit,
                "scope": factor.scope,
                "geographic_scope": factor.geographic_scope,
                "source": factor.source,
            },
            "factor_selection": plan.resolution.to_snapshot(),
            "calculation": {
                "formula": "normalized_quantity * co2e_factor",
                "calculated_value_co2e": str(plan.calculated_value),
                "output_unit": OutputUnit.KG_CO2E,
            },
            "engine_version": self.settings.engine_version,
        }

    async def _persist(
        self,
        plan: PlannedCalculation,
        organization_id: UUID,
        user_id: UUID,
        index: int,
        calculations_saved: int,
    ):
        """Write the calculation and its audit log in one transaction."""
        factor = plan.resolution.factor
        emission = CalculatedEmissionDBModel(
            id=uuid4(),
            organization_id=organization_id,
            activity_data_id=plan.activity.id,
            emissions_factor_id=factor.id,
            calculated_value_co2e=plan.calculated_value,
            scope=plan.mapping.scope,
        )

        stage = "calculation"
        try:
            self.session.add(emission)
            await self.session.flush()

            stage = "audit_log"
            await self.audit_logger.record(
                organization_id=organization_id,
                user_id=user_id,
                input_data=self._snapshot(plan),
                output_value=plan.calculated_value,
                output_unit=OutputUnit.KG_CO2E,
                methodology_version=self.settings.scope12_methodology_version,
                factor_ids_used=[factor.id],
                calculated_emission_id=emission.id,
            )
            await self.session.commit()
        except (SQLAlchemyError, ValueError) as e:
            await self.session.rollback()
            message = (
                "Calculation succeeded but logging failed"
                if stage == "audit_log"
                else "Failed to save calculation"
            )
            logger.error(
                f"{message} for activity {plan.activity.id} at batch index {index}: {e}"
            )
            raise PersistenceError(
                message,
                calculations_saved=calculations_saved,
                failed_at_index=index,
                failed_stage=stage,
                details=str(e),
            ) from e

        logger.debug(
            f"Activity {plan.activity.id}: {plan.calculated_value} kgCO2e "
            f"(factor {factor.fuel_type} {factor.factor_year})"
        )
