"""
Stationary combustion calculator.

Scope 1 emissions from fuel burnt on site, given as delivered energy in kWh.
"""

import logging
from uuid import UUID

from app.pydantic_models.calculation import (
    StationaryCombustionMetadata,
    StationaryCombustionRequest,
    StationaryCombustionResponse,
)
from app.services.calculators.emission_calculator import EmissionCalculationEngine
from app.services.calculators.single_shot import SingleShotCalculator
from app.utils.constants import CalculationType, FactorType, OutputUnit

logger = logging.getLogger(__name__)


class StationaryCombustionCalculator(SingleShotCalculator):
    """
    Service for stationary combustion emissions.

    Formula:
        tCO2e = fuel_energy_kwh * factor (kgCO2e/kWh) / 1000
    """

    factor_type = FactorType.STATIONARY_COMBUSTION_ENERGY
    missing_factor_message = (
        "No Scope 1 stationary combustion emissions factor found for fuel type"
    )

    async def calculate(
        self, request: StationaryCombustionRequest, organization_id: UUID, user_id: UUID
    ) -> StationaryCombustionResponse:
        activity = request.activity_data
        await self.provenance.validate(request.provenance_id, organization_id)
        factor = await self.latest_factor(activity.fuel_type)

        emissions = EmissionCalculationEngine.calculate_energy_tco2e(
            activity.fuel_energy_kwh, factor.co2e_factor
        )

        entry = await self.write_log(
            organization_id=organization_id,
            user_id=user_id,
            input_data={
                "calculation_type": CalculationType.SCOPE_1_STATIONARY_COMBUSTION,
                "provenance_id": request.provenance_id,
                "activity_data": activity.model_dump(),
                "emissions_factor_used": self.factor_snapshot(factor),
                "calculation": {
                    "formula": "fuel_energy_kwh * co2e_factor / 1000",
                    "emissions": str(emissions),
                    "output_unit": OutputUnit.T_CO2E,
                },
                "engine_version": self.settings.engine_version,
            },
            output_value=emissions,
            methodology_version=self.settings.stationary_combustion_methodology_version,
            factor=factor,
        )

        logger.info(
            f"Stationary combustion {activity.fuel_energy_kwh} kWh ({activity.fuel_type}) "
            f"= {emissions} tCO2e, log {entry.log_id}"
        )
        return StationaryCombustionResponse(
            emissions_tco2e=float(emissions),
            calculation_log_id=entry.log_id,
            metadata=StationaryCombustionMetadata(
                fuel_type=activity.fuel_type,
                fuel_energy_kwh=activity.fuel_energy_kwh,
                factor_value=float(factor.co2e_factor),
                factor_unit=factor.factor_unit,
                factor_source=factor.source,
                factor_year=factor.factor_year,
                methodology=self.settings.stationary_combustion_methodology_version,
                engine_version=self.settings.engine_version,
                calculation_type=CalculationType.SCOPE_1_STATIONARY_COMBUSTION,
            ),
        )
