"""
Unit normalization for emissions calculations.

Canonicalizes the unit strings users type on activity records (litres, ltr,
kilowatt-hours, kgs, ...) into the units emission factors are published in,
and rescales quantities where the magnitude differs (g -> kg, ml -> L).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedQuantity:
    """
    Quantity expressed in a canonical unit.

    ``conversion_factor`` is the multiplier applied to the original quantity
    (0.001 for g -> kg). ``recognized`` is False when the unit was not in the
    alias table and was passed through untouched.
    """

    quantity: Decimal
    unit: str
    original_quantity: Decimal
    original_unit: str
    conversion_factor: Decimal = Decimal("1")
    recognized: bool = True

    @property
    def converted(self) -> bool:
        return self.conversion_factor != Decimal("1")

    @property
    def warning(self) -> Optional[str]:
        if self.recognized:
            return None
        return f"Unrecognized unit '{self.original_unit}' passed through unchanged"

    def scale_per_unit_value(self, value: float | Decimal) -> Decimal:
        """
        Rescale a value expressed per original unit to per canonical unit.

        A carbon intensity of 0.002 kgCO2e per gram becomes 2 kgCO2e per
        kilogram when the quantity was converted from g to kg.

        Example:
            >>> nq = UnitConverter.normalize(500, "g")
            >>> nq.scale_per_unit_value(Decimal("0.002"))
            Decimal('2')
        """
        return UnitConverter.normalize_number(value) / self.conversion_factor

    def to_snapshot(self) -> dict:
        return {
            "original_quantity": str(self.original_quantity),
            "original_unit": self.original_unit,
            "normalized_quantity": str(self.quantity),
            "normalized_unit": self.unit,
            "conversion_factor": str(self.conversion_factor),
            "unit_recognized": self.recognized,
        }


class UnitConverter:
    """
    Unit conversion service.

    Stateless helpers used by the batch engine and single-shot calculators.
    """

    LITRE = "L"
    KILOGRAM = "kg"
    KWH = "kWh"
    CUBIC_METRE = "m3"

    KG_TO_TONNES = Decimal("0.001")
    MILLI = Decimal("0.001")
    KILO = Decimal("1000")

    # alias -> (canonical unit, multiplier)
    UNIT_ALIASES: dict[str, tuple[str, Decimal]] = {
        "l": (LITRE, Decimal("1")),
        "ltr": (LITRE, Decimal("1")),
        "ltrs": (LITRE, Decimal("1")),
        "litre": (LITRE, Decimal("1")),
        "litres": (LITRE, Decimal("1")),
        "liter": (LITRE, Decimal("1")),
        "liters": (LITRE, Decimal("1")),
        "ml": (LITRE, MILLI),
        "millilitre": (LITRE, MILLI),
        "millilitres": (LITRE, MILLI),
        "milliliter": (LITRE, MILLI),
        "milliliters": (LITRE, MILLI),
        "kg": (KILOGRAM, Decimal("1")),
        "kgs": (KILOGRAM, Decimal("1")),
        "kilogram": (KILOGRAM, Decimal("1")),
        "kilograms": (KILOGRAM, Decimal("1")),
        "g": (KILOGRAM, MILLI),
        "gram": (KILOGRAM, MILLI),
        "grams": (KILOGRAM, MILLI),
        "t": (KILOGRAM, KILO),
        "tonne": (KILOGRAM, KILO),
        "tonnes": (KILOGRAM, KILO),
        "metric ton": (KILOGRAM, KILO),
        "metric tons": (KILOGRAM, KILO),
        "kwh": (KWH, Decimal("1")),
        "kilowatt-hour": (KWH, Decimal("1")),
        "kilowatt-hours": (KWH, Decimal("1")),
        "kilowatt hours": (KWH, Decimal("1")),
        "mwh": (KWH, KILO),
        "megawatt-hours": (KWH, KILO),
        "m3": (CUBIC_METRE, Decimal("1")),
        "m³": (CUBIC_METRE, Decimal("1")),
        "cubic metre": (CUBIC_METRE, Decimal("1")),
        "cubic metres": (CUBIC_METRE, Decimal("1")),
        "cubic meters": (CUBIC_METRE, Decimal("1")),
    }

    COUNT_UNITS = frozenset(
        {"unit", "units", "piece", "pieces", "bottle", "bottles", "item", "items"}
    )

    @staticmethod
    def normalize_number(value: str | float | Decimal) -> Decimal:
        """
        Normalize a number value to Decimal.

        Handles string inputs with commas, floats, and existing Decimals.

        Example:
            >>> UnitConverter.normalize_number("1,234.56")
            Decimal('1234.56')
        """

        if isinstance(value, Decimal):
            return value

        if isinstance(value, str):
            value = value.replace(",", "")

        return Decimal(str(value))

    @classmethod
    def canonical_unit(cls, unit: str) -> Optional[str]:
        """Canonical label for a unit string, None when unknown."""
        alias = cls.UNIT_ALIASES.get(unit.strip().lower())
        return alias[0] if alias else None

    @classmethod
    def normalize(cls, quantity: str | float | Decimal, unit: str) -> NormalizedQuantity:
        """
        Convert a quantity into its canonical unit.

        Count-based units pass through unchanged. Unknown units pass through
        unchanged with ``recognized=False`` and a warning log entry.

        Example:
            >>> UnitConverter.normalize(2500, "ml")
            NormalizedQuantity(quantity=Decimal('2.500'), unit='L', ...)
        """
        original_quantity = cls.normalize_number(quantity)
        key = (unit or "").strip().lower()

        if key in cls.COUNT_UNITS:
            return NormalizedQuantity(original_quantity, unit, original_quantity, unit)

        alias = cls.UNIT_ALIASES.get(key)
        if alias is None:
            logger.warning(f"Unrecognized unit '{unit}', passing quantity through unchanged")
            return NormalizedQuantity(
                original_quantity, unit, original_quantity, unit, recognized=False
            )

        canonical, multiplier = alias
        return NormalizedQuantity(
            original_quantity * multiplier,
            canonical,
            original_quantity,
            unit,
            conversion_factor=multiplier,
        )

    @classmethod
    def units_match(cls, activity_unit: str, factor_unit: str) -> bool:
        """
        Compare a normalized activity unit with a factor's declared unit.

        Both sides are canonicalized; unknown units compare case-insensitively.
        """
        left = cls.canonical_unit(activity_unit) or activity_unit.strip().lower()
        right = cls.canonical_unit(factor_unit) or factor_unit.strip().lower()
        return left == right

    @staticmethod
    def kg_to_tonnes(kg: float | Decimal) -> Decimal:
        """
        Convert kilograms to tonnes.

        Args:
            kg: Mass in kilograms

        Returns:
            Mass in tonnes as Decimal
        """

        if isinstance(kg, float):
            kg = Decimal(str(kg))
        return kg * UnitConverter.KG_TO_TONNES
