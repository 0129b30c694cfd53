"""
Emission calculation engine.

Pure arithmetic: no session, no persistence. Quantity-based results are not
rounded to a reporting precision because aggregation re-sums them; callers
quantize them to the 10 dp storage scale before persisting. Spend-based and
energy tCO2e results are rounded to 6 decimal places (half-up).
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.pydantic_models.reference_tables import ExchangeRateTable
from app.services.calculators.unit_converter import UnitConverter
from app.utils.constants import KGCO2E_PRECISION, TCO2E_PRECISION

logger = logging.getLogger(__name__)

SPEND_FACTOR_DIVISOR = Decimal("1000000")


class EmissionCalculationError(Exception):
    """
    Exception raised when an emission value cannot be computed.

    Carries the offending inputs so the orchestrator can report the activity
    as unmatched with a readable reason.
    """

    def __init__(
        self, message: str, quantity=None, factor_value=None, original_exception: Exception | None = None
    ):
        self.message = message
        self.quantity = quantity
        self.factor_value = factor_value
        self.original_exception = original_exception

        error_msg = f"{message} (quantity={quantity}, factor={factor_value})"
        if original_exception:
            error_msg += (
                f"\nCaused by: {type(original_exception).__name__}: "
                f"{original_exception}"
            )

        super().__init__(error_msg)


@dataclass(frozen=True)
class SpendCalculation:
    """Result of a spend-based calculation."""

    spend: Decimal
    currency: str
    exchange_rate: Decimal
    normalised_spend: Decimal
    emissions_tco2e: Decimal


class EmissionCalculationEngine:
    """
    Arithmetic core of the engine.

    Formulas:
        quantity-based:  kgCO2e = normalized_quantity * factor
        spend-based:     tCO2e  = round6(spend * rate * factor / 1_000_000)
        energy-based:    tCO2e  = round6(kwh * factor / 1000)
    """

    @staticmethod
    def round_tco2e(value: Decimal) -> Decimal:
        return value.quantize(TCO2E_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def to_storage_precision(value: Decimal) -> Decimal:
        """Quantize a kgCO2e value to the scale of the stored columns (10 dp, half-up)."""
        return value.quantize(KGCO2E_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def _validate(quantity: Decimal, factor_value: Decimal):
        if quantity < 0:
            raise EmissionCalculationError("Quantity must not be negative", quantity, factor_value)
        if factor_value < 0:
            raise EmissionCalculationError("Emission factor must not be negative", quantity, factor_value)

    @classmethod
    def calculate_quantity_based(
        cls, quantity: float | Decimal, factor_value: float | Decimal
    ) -> Decimal:
        """
        Calculate kgCO2e for a normalized quantity.

        Example:
            >>> EmissionCalculationEngine.calculate_quantity_based(Decimal("1000"), Decimal("0.182"))
            Decimal('182.000')
        """
        quantity = UnitConverter.normalize_number(quantity)
        factor_value = UnitConverter.normalize_number(factor_value)
        cls._validate(quantity, factor_value)
        return quantity * factor_value

    @classmethod
    def calculate_spend_based(
        cls,
        spend: float | Decimal,
        currency: str,
        factor_value: float | Decimal,
        exchange_rates: ExchangeRateTable,
    ) -> SpendCalculation:
        """
        Calculate tCO2e for a spend in any supported currency.

        The spend is first normalised into the reference currency using the
        fixed rate table; the factor is kgCO2e per reference-currency unit.

        Example:
            >>> calc = EmissionCalculationEngine.calculate_spend_based(200, "GBP", Decimal("0.15"), rates)
            >>> calc.normalised_spend, calc.emissions_tco2e
            (Decimal('254.00'), Decimal('0.000038'))
        """
        rate = exchange_rates.rate_for(currency)
        if rate is None:
            raise EmissionCalculationError(f"No exchange rate for currency {currency}", spend, factor_value)

        spend = UnitConverter.normalize_number(spend)
        factor_value = UnitConverter.normalize_number(factor_value)
        cls._validate(spend, factor_value)

        normalised_spend = spend * rate
        emissions = cls.round_tco2e(normalised_spend * factor_value / SPEND_FACTOR_DIVISOR)

        logger.debug(
            f"Spend {spend} {currency} -> {normalised_spend} {exchange_rates.reference_currency} "
            f"x {factor_value} = {emissions} tCO2e"
        )
        return SpendCalculation(spend, currency.upper(), rate, normalised_spend, emissions)

    @classmethod
    def calculate_energy_tco2e(
        cls, energy_kwh: float | Decimal, factor_value: float | Decimal
    ) -> Decimal:
        """Calculate tCO2e for energy in kWh with a kgCO2e/kWh factor."""
        kg = cls.calculate_quantity_based(energy_kwh, factor_value)
        return cls.round_tco2e(UnitConverter.kg_to_tonnes(kg))
