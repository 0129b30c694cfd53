"""
Tests for emission factor year selection.
"""
import uuid
from datetime import date
from decimal import Decimal

import pytest

from app.database.schemas import EmissionFactorDBModel
from app.services.selectors.factor_resolver import FactorResolver


def make_factor(year, fuel_type="grid_electricity", geography="UK", unit="kWh"):
    return EmissionFactorDBModel(
        id=uuid.uuid4(),
        fuel_type=fuel_type,
        factor_type="energy",
        factor_year=year,
        co2e_factor=Decimal("0.2"),
        factor_unit=unit,
        scope="2",
        geographic_scope=geography,
    )


@pytest.fixture
def resolver():
    return FactorResolver([make_factor(2022), make_factor(2023), make_factor(2024)], "UK")


def test_newest_year_not_after_target(resolver):
    resolution = resolver.resolve("grid_electricity", 2025)

    assert resolution.factor.factor_year == 2024
    assert not resolution.future_year_fallback


def test_exact_year(resolver):
    assert resolver.resolve("grid_electricity", 2023).factor.factor_year == 2023


def test_oldest_year_when_all_factors_are_newer(resolver):
    resolution = resolver.resolve("grid_electricity", 2021)

    assert resolution.factor.factor_year == 2022
    assert resolution.future_year_fallback
    assert resolution.to_snapshot() == {
        "target_year": 2021,
        "selected_year": 2022,
        "future_year_fallback": True,
        "geography_fallback": False,
    }


def test_undated_activity_uses_newest_factor(resolver):
    assert resolver.resolve("grid_electricity", None).factor.factor_year == 2024


def test_unknown_key_returns_none(resolver):
    assert resolver.resolve("natural_gas_kwh", 2024) is None
    assert not resolver.has_key("natural_gas_kwh")


def test_prefers_configured_geography():
    resolver = FactorResolver(
        [make_factor(2024, geography="US"), make_factor(2023, geography="UK")], "UK"
    )

    resolution = resolver.resolve("grid_electricity", 2024)

    assert resolution.factor.geographic_scope == "UK"
    assert not resolution.geography_fallback


def test_falls_back_to_other_geography():
    resolver = FactorResolver([make_factor(2024, geography="US")], "UK")

    resolution = resolver.resolve("grid_electricity", 2024)

    assert resolution.factor.geographic_scope == "US"
    assert resolution.geography_fallback


def test_target_year_prefers_period_end():
    assert FactorResolver.target_year_for(date(2024, 3, 31), date(2023, 12, 1)) == 2024
    assert FactorResolver.target_year_for(None, date(2023, 12, 1)) == 2023
    assert FactorResolver.target_year_for(None, None) is None


def test_units_compatible():
    assert FactorResolver.units_compatible("L", make_factor(2024, unit="litre"))
    assert not FactorResolver.units_compatible("kg", make_factor(2024, unit="kWh"))
