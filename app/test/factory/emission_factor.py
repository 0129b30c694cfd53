"""
Factories for emission factors.
"""
import uuid
from datetime import datetime
from decimal import Decimal

import factory

from app.database.schemas import EmissionFactorDBModel
from app.test.factory.base_factory import AsyncSQLAlchemyFactory
from app.test.factory.create_async_session import async_session
from app.utils.constants import FactorType, Scope


class EmissionFactorFactory(AsyncSQLAlchemyFactory):
    """Factory for creating energy emission factors (grid electricity by default)."""

    class Meta:
        model = EmissionFactorDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    fuel_type = "grid_electricity"
    fuel_type_display = "Grid Electricity (UK Average)"
    factor_type = FactorType.ENERGY
    factor_year = 2024
    co2e_factor = Decimal("0.182")
    factor_unit = "kWh"
    scope = Scope.SCOPE_2
    category = "Electricity"
    subcategory = None
    geographic_scope = "UK"
    source = factory.LazyAttribute(lambda o: f"DEFRA {o.factor_year}")
    source_url = None
    notes = None
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)


class NaturalGasFactorFactory(EmissionFactorFactory):
    fuel_type = "natural_gas_kwh"
    fuel_type_display = "Natural Gas (by kWh)"
    co2e_factor = Decimal("0.18293")
    scope = Scope.SCOPE_1
    category = "Fuels"


class DieselFactorFactory(EmissionFactorFactory):
    fuel_type = "diesel_stationary"
    fuel_type_display = "Diesel (Stationary Combustion)"
    co2e_factor = Decimal("2.70458")
    factor_unit = "litre"
    scope = Scope.SCOPE_1
    category = "Fuels"


class TravelSpendFactorFactory(EmissionFactorFactory):
    """Spend-based business travel factor in kgCO2e per USD."""

    fuel_type = "flight_economy_short_haul"
    fuel_type_display = "Flights - Economy - Short haul"
    factor_type = FactorType.BUSINESS_TRAVEL_SPEND
    co2e_factor = Decimal("0.15")
    factor_unit = "USD"
    scope = Scope.SCOPE_3
    category = "Business travel"
    source = "Spend-based 2024"


class StationaryCombustionFactorFactory(EmissionFactorFactory):
    fuel_type = "natural_gas"
    fuel_type_display = "Natural Gas"
    factor_type = FactorType.STATIONARY_COMBUSTION_ENERGY
    co2e_factor = Decimal("0.18293")
    scope = Scope.SCOPE_1
    category = "Fuels"
