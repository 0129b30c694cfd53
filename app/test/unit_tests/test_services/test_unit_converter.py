"""
Tests for unit normalization.
"""
from decimal import Decimal

import pytest

from app.services.calculators.unit_converter import UnitConverter


@pytest.mark.parametrize(
    "quantity, unit, expected_quantity, expected_unit",
    [
        (Decimal("500"), "g", Decimal("0.5"), "kg"),
        (Decimal("2500"), "ml", Decimal("2.5"), "L"),
        (Decimal("2"), "tonnes", Decimal("2000"), "kg"),
        (Decimal("1.8"), "MWh", Decimal("1800"), "kWh"),
        (Decimal("420"), "litres", Decimal("420"), "L"),
        (Decimal("12"), "Kilowatt-Hours", Decimal("12"), "kWh"),
    ],
)
def test_normalize_converts_to_canonical_units(quantity, unit, expected_quantity, expected_unit):
    normalized = UnitConverter.normalize(quantity, unit)

    assert normalized.quantity == expected_quantity
    assert normalized.unit == expected_unit
    assert normalized.original_quantity == quantity
    assert normalized.original_unit == unit
    assert normalized.recognized


def test_gram_intensity_is_rescaled_per_kilogram():
    normalized = UnitConverter.normalize(Decimal("500"), "g")

    assert normalized.converted
    assert normalized.scale_per_unit_value(Decimal("0.002")) == Decimal("2")


def test_count_units_pass_through_unchanged():
    normalized = UnitConverter.normalize(Decimal("24"), "bottles")

    assert normalized.quantity == Decimal("24")
    assert normalized.unit == "bottles"
    assert not normalized.converted
    assert normalized.warning is None


def test_unknown_unit_passes_through_with_warning():
    normalized = UnitConverter.normalize(Decimal("7"), "barrels")

    assert normalized.quantity == Decimal("7")
    assert normalized.unit == "barrels"
    assert not normalized.recognized
    assert "barrels" in normalized.warning


def test_normalize_number_strips_thousands_separators():
    assert UnitConverter.normalize_number("12,450.5") == Decimal("12450.5")
    assert UnitConverter.normalize_number(0.1) == Decimal("0.1")


@pytest.mark.parametrize(
    "activity_unit, factor_unit, expected",
    [
        ("L", "litre", True),
        ("kWh", "kwh", True),
        ("kg", "kWh", False),
        ("L", "m3", False),
        ("barrels", "Barrels", True),
    ],
)
def test_units_match(activity_unit, factor_unit, expected):
    assert UnitConverter.units_match(activity_unit, factor_unit) is expected


def test_snapshot_records_conversion():
    snapshot = UnitConverter.normalize(Decimal("2500"), "ml").to_snapshot()

    assert snapshot["original_unit"] == "ml"
    assert snapshot["normalized_unit"] == "L"
    assert Decimal(snapshot["conversion_factor"]) == Decimal("0.001")
    assert snapshot["unit_recognized"] is True
