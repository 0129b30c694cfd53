"""
Tests for facility/period aggregation.
"""
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.database.repositories import CalculatedEmissionRepository
from app.database.schemas import CalculatedEmissionDBModel, FacilityEmissionsAggregateDBModel
from app.database.session_manager.db_session import Database
from app.services.aggregators.facility_aggregator import FacilityAggregator
from app.test.factory.activity import ActivityDataFactory, NaturalGasActivityFactory
from app.test.factory.emission_factor import EmissionFactorFactory, NaturalGasFactorFactory


async def calculate(activity, factor, value):
    async with Database() as session:
        session.add(
            CalculatedEmissionDBModel(
                organization_id=activity.organization_id,
                activity_data_id=activity.id,
                emissions_factor_id=factor.id,
                calculated_value_co2e=value,
                scope=factor.scope,
            )
        )


async def get_aggregates(organization_id):
    async with Database() as session:
        stmt = select(FacilityEmissionsAggregateDBModel).where(
            FacilityEmissionsAggregateDBModel.organization_id == organization_id
        )
        return (await session.execute(stmt)).scalars().all()


@pytest.mark.asyncio
async def test_aggregate_sums_scopes_per_facility_period(test_db_session):
    organization_id, facility_id = uuid.uuid4(), uuid.uuid4()
    electricity = await EmissionFactorFactory()
    gas = await NaturalGasFactorFactory()
    bill = await ActivityDataFactory(organization_id=organization_id, facility_id=facility_id)
    meter = await NaturalGasActivityFactory(
        organization_id=organization_id, facility_id=facility_id, unit="kWh"
    )
    await calculate(bill, electricity, Decimal("182.000"))
    await calculate(meter, gas, Decimal("91.465"))

    result = await FacilityAggregator(test_db_session).aggregate(
        organization_id, [bill.id, meter.id]
    )

    assert len(result.aggregated) == 1
    assert result.failed == []

    (aggregate,) = await get_aggregates(organization_id)
    assert aggregate.facility_id == facility_id
    assert aggregate.reporting_period_start == date(2024, 1, 1)
    assert aggregate.reporting_period_end == date(2024, 3, 31)
    assert Decimal(str(aggregate.total_co2e)) == Decimal("273.465")
    assert Decimal(str(aggregate.scope1_co2e)) == Decimal("91.465")
    assert Decimal(str(aggregate.scope2_co2e)) == Decimal("182.000")
    assert aggregate.activity_count == 2
    assert aggregate.calculation_method == "primary_verified_bills"
    assert aggregate.results_payload["factor_years"] == [2024]


@pytest.mark.asyncio
async def test_aggregate_overwrites_instead_of_incrementing(test_db_session):
    organization_id, facility_id = uuid.uuid4(), uuid.uuid4()
    factor = await EmissionFactorFactory()
    activity = await ActivityDataFactory(organization_id=organization_id, facility_id=facility_id)
    await calculate(activity, factor, Decimal("182.000"))

    aggregator = FacilityAggregator(test_db_session)
    await aggregator.aggregate(organization_id, [activity.id])
    await aggregator.aggregate(organization_id, [activity.id])

    (aggregate,) = await get_aggregates(organization_id)
    assert Decimal(str(aggregate.total_co2e)) == Decimal("182.000")
    assert aggregate.activity_count == 1


@pytest.mark.asyncio
async def test_stale_keys_are_caught_up(test_db_session):
    organization_id = uuid.uuid4()
    factor = await EmissionFactorFactory()
    first = await ActivityDataFactory(organization_id=organization_id, facility_id=uuid.uuid4())
    second = await ActivityDataFactory(
        organization_id=organization_id,
        facility_id=uuid.uuid4(),
        reporting_period_start=date(2024, 4, 1),
        reporting_period_end=date(2024, 6, 30),
    )
    await calculate(first, factor, Decimal("182.000"))
    await calculate(second, factor, Decimal("182.000"))

    aggregator = FacilityAggregator(test_db_session)
    assert len(await aggregator.find_stale_keys(organization_id)) == 2

    # Only the first activity was part of "this batch"; the second is caught up
    result = await aggregator.aggregate(organization_id, [first.id])

    assert len(result.aggregated) == 2
    assert await aggregator.find_stale_keys(organization_id) == set()
    assert len(await get_aggregates(organization_id)) == 2


@pytest.mark.asyncio
async def test_activities_without_facility_are_not_aggregated(test_db_session):
    organization_id = uuid.uuid4()
    factor = await EmissionFactorFactory()
    activity = await ActivityDataFactory(organization_id=organization_id)
    await calculate(activity, factor, Decimal("182.000"))

    result = await FacilityAggregator(test_db_session).aggregate(organization_id, [activity.id])

    assert result.aggregated == []
    assert await get_aggregates(organization_id) == []


@pytest.mark.asyncio
async def test_factor_years_are_recorded_per_key(test_db_session):
    organization_id, facility_id = uuid.uuid4(), uuid.uuid4()
    old = await EmissionFactorFactory(factor_year=2022)
    new = await EmissionFactorFactory(factor_year=2024)
    first = await ActivityDataFactory(organization_id=organization_id, facility_id=facility_id)
    second = await ActivityDataFactory(organization_id=organization_id, facility_id=facility_id)
    await calculate(first, old, Decimal("190"))
    await calculate(second, new, Decimal("182"))

    await FacilityAggregator(test_db_session).aggregate(organization_id, [first.id, second.id])

    (aggregate,) = await get_aggregates(organization_id)
    assert aggregate.results_payload["factor_years"] == [2022, 2024]
    assert Decimal(str(aggregate.total_co2e)) == Decimal("372")


@pytest.mark.asyncio
async def test_key_lookup_failure_does_not_raise(test_db_session, monkeypatch):
    organization_id = uuid.uuid4()
    factor = await EmissionFactorFactory()
    activity = await ActivityDataFactory(organization_id=organization_id, facility_id=uuid.uuid4())
    await calculate(activity, factor, Decimal("182"))

    async def failing_lookup(self, activity_ids):
        raise OperationalError("SELECT activity_data", {}, Exception("database is locked"))

    monkeypatch.setattr(CalculatedEmissionRepository, "get_keys_for_activities", failing_lookup)

    result = await FacilityAggregator(test_db_session).aggregate(organization_id, [activity.id])

    assert result.aggregated == []
    assert result.failed == []
    assert await get_aggregates(organization_id) == []
