"""
Business travel spend calculator.

Scope 3, Category 6 emissions from an amount spent on travel, using the
spend-based method: the spend is normalised to USD with the fixed rate table
and multiplied by a kgCO2e per USD factor.
"""

import logging
from uuid import UUID

from app.pydantic_models.calculation import (
    TravelSpendMetadata,
    TravelSpendRequest,
    TravelSpendResponse,
)
from app.services.calculators.emission_calculator import EmissionCalculationEngine
from app.services.calculators.single_shot import SingleShotCalculator
from app.utils.constants import CalculationType, FactorType, OutputUnit

logger = logging.getLogger(__name__)


class TravelSpendCalculator(SingleShotCalculator):
    """
    Service for spend-based business travel emissions.

    Formula:
        tCO2e = spend * exchange_rate_to_usd * factor (kgCO2e/USD) / 1_000_000
    """

    factor_type = FactorType.BUSINESS_TRAVEL_SPEND
    missing_factor_message = (
        "No Scope 3 Category 6 business travel emissions factor found for travel type"
    )

    async def calculate(
        self, request: TravelSpendRequest, organization_id: UUID, user_id: UUID
    ) -> TravelSpendResponse:
        """
        Calculate and log emissions for one travel spend.

        Args:
            request: Validated request body
            organization_id: Active organization of the caller
            user_id: Calling user

        Returns:
            TravelSpendResponse with the tCO2e value and factor metadata

        Raises:
            NotFoundError: Invalid provenance, or no factor for the travel type
            PersistenceError: If the audit entry cannot be written

        Example:
            200 GBP at 1.27 USD/GBP with a 0.15 kgCO2e/USD factor
            -> 254 USD -> 0.000038 tCO2e
        """
        activity = request.activity_data
        await self.provenance.validate(request.provenance_id, organization_id)
        factor = await self.latest_factor(activity.travel_type)

        exchange_rates = self.reference_tables.exchange_rates
        calculation = EmissionCalculationEngine.calculate_spend_based(
            activity.spend, activity.currency, factor.co2e_factor, exchange_rates
        )

        entry = await self.write_log(
            organization_id=organization_id,
            user_id=user_id,
            input_data={
                "calculation_type": CalculationType.SCOPE_3_TRAVEL_SPEND,
                "provenance_id": request.provenance_id,
                "activity_data": activity.model_dump(),
                "emissions_factor_used": self.factor_snapshot(factor),
                "currency_conversion": {
                    "reference_currency": exchange_rates.reference_currency,
                    "exchange_rate": str(calculation.exchange_rate),
                    "normalised_spend": str(calculation.normalised_spend),
                },
                "calculation": {
                    "formula": "spend * exchange_rate * co2e_factor / 1000000",
                    "emissions": str(calculation.emissions_tco2e),
                    "output_unit": OutputUnit.T_CO2E,
                },
                "engine_version": self.settings.engine_version,
            },
            output_value=calculation.emissions_tco2e,
            methodology_version=self.settings.travel_spend_methodology_version,
            factor=factor,
        )

        logger.info(
            f"Travel spend {calculation.spend} {calculation.currency} ({activity.travel_type}) "
            f"= {calculation.emissions_tco2e} tCO2e, log {entry.log_id}"
        )
        return TravelSpendResponse(
            emissions_tco2e=float(calculation.emissions_tco2e),
            calculation_log_id=entry.log_id,
            metadata=TravelSpendMetadata(
                travel_type=activity.travel_type,
                factor_value=float(factor.co2e_factor),
                factor_unit=factor.factor_unit,
                factor_source=factor.source,
                factor_year=factor.factor_year,
                spend_original=activity.spend,
                currency_original=calculation.currency,
                spend_normalised_usd=float(calculation.normalised_spend),
                exchange_rate_used=float(calculation.exchange_rate),
                methodology=self.settings.travel_spend_methodology_version,
                engine_version=self.settings.engine_version,
                calculation_type=CalculationType.SCOPE_3_TRAVEL_SPEND,
            ),
        )
