"""
Tests for fuel type mapping.
"""
import pytest

from app.services.calculators.fuel_type_mapper import FuelTypeMapper


@pytest.fixture
def mapper(reference_tables):
    return FuelTypeMapper(reference_tables, fuzzy_threshold=80)


def test_label_in_mapping_table(mapper):
    mapping = mapper.map("electricity_grid", "Scope 2", "Main site electricity", "kWh")

    assert mapping.fuel_type_key == "grid_electricity"
    assert mapping.scope == "2"
    assert mapping.method == "mapping_table"


def test_unknown_label_is_used_as_key_with_category_scope(mapper):
    mapping = mapper.map("biogas", "Scope 1", "Digester output", "kWh")

    assert mapping.fuel_type_key == "biogas"
    assert mapping.scope == "1"
    assert mapping.method == "raw_label"


@pytest.mark.parametrize(
    "name, unit, expected_key, expected_scope",
    [
        ("Natural Gas - Head office", "m3", "natural_gas_m3", "1"),
        ("Gas supply - Head office", "kWh", "natural_gas_kwh", "1"),
        ("Electricity bill Q1", "kWh", "grid_electricity", "2"),
        ("Propane cylinders", "L", "lpg_litre", "1"),
        ("District steam supply", "kWh", "heat_steam", "2"),
    ],
)
def test_name_keywords(mapper, name, unit, expected_key, expected_scope):
    mapping = mapper.map(None, "Scope 1", name, unit)

    assert mapping.fuel_type_key == expected_key
    assert mapping.scope == expected_scope
    assert mapping.method == "name_keyword"


def test_fuzzy_match_against_labels(mapper):
    mapping = mapper.map("", "Scope 1", "Leakage refrigerant", "kg")

    assert mapping.fuel_type_key == "refrigerant_r410a"
    assert mapping.method == "fuzzy_label"
    assert mapping.confidence >= 80


def test_fallback_to_slugged_name(mapper):
    mapping = mapper.map(None, "Scope 2", "Solar PPA top-up", "kWh")

    assert mapping.fuel_type_key == "solar_ppa_top_up"
    assert mapping.scope == "2"
    assert mapping.method == "fallback"
    assert mapping.confidence == 0


def test_mapper_is_total_without_label_or_name(mapper):
    mapping = mapper.map(None, None, None, None)

    assert mapping.fuel_type_key == "unknown"
    assert mapping.scope == "1"


@pytest.mark.parametrize(
    "name, unit, expected_key",
    [
        ("Refrigerant Leakage - 2024-01-01 to 2024-12-31", "kg", "refrigerant_r410a"),
        ("Natural Gas - 2024-01-01 to 2024-12-31", "kWh", "natural_gas_kwh"),
        ("heavy_fuel_oil - 2023-04-01 to 2024-03-31", "L", "heavy_fuel_oil"),
    ],
)
def test_label_contained_in_dated_name(mapper, name, unit, expected_key):
    mapping = mapper.map(None, "Scope 1", name, unit)

    assert mapping.fuel_type_key == expected_key
    assert mapping.scope == "1"
    assert mapping.method == "name_label"


def test_unit_keyword_takes_precedence_over_contained_label(mapper):
    mapping = mapper.map(None, "Scope 1", "Natural Gas - 2024-01-01 to 2024-12-31", "m3")

    assert mapping.fuel_type_key == "natural_gas_m3"
    assert mapping.method == "name_keyword"
