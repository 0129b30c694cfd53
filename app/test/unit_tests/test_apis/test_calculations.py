"""
API tests for the calculation endpoints.
"""
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import jwt
import pytest
from sqlalchemy import func, select

from app.database.schemas import (
    CalculatedEmissionDBModel,
    CalculationLogDBModel,
    FacilityEmissionsAggregateDBModel,
)
from app.database.session_manager.db_session import Database
from app.test.factory.activity import ActivityDataFactory, NaturalGasActivityFactory
from app.test.factory.emission_factor import (
    EmissionFactorFactory,
    NaturalGasFactorFactory,
    StationaryCombustionFactorFactory,
    TravelSpendFactorFactory,
)
from app.test.factory.organization_member import OrganizationMemberFactory
from app.test.factory.provenance import DataProvenanceFactory

SCOPE12_URL = "/api/v1/calculations/calculate-scope1-2"
TRAVEL_SPEND_URL = "/api/v1/calculations/calculate-scope3-travel-spend"
STATIONARY_URL = "/api/v1/calculations/calculate-scope1-stationary-combustion"


async def count_rows(model):
    async with Database() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


def travel_payload(provenance_id, **activity):
    return {
        "provenance_id": str(provenance_id),
        "activity_data": {
            "travel_type": "flight_economy_short_haul",
            "spend": 200,
            "currency": "GBP",
            **activity,
        },
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("url", [SCOPE12_URL, TRAVEL_SPEND_URL, STATIONARY_URL])
async def test_missing_token_is_rejected(test_async_client, url):
    response = await test_async_client.post(url, json={})

    assert response.status_code == 401
    assert response.json() == {"error": "Missing authorization header"}


@pytest.mark.asyncio
async def test_invalid_and_expired_tokens(test_async_client, auth_headers, test_config):
    response = await test_async_client.post(
        SCOPE12_URL, json={}, headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid authentication token"

    expired = auth_headers(uuid.uuid4(), exp=datetime.utcnow() - timedelta(minutes=5))
    response = await test_async_client.post(SCOPE12_URL, json={}, headers=expired)
    assert response.status_code == 401
    assert response.json()["error"] == "Token has expired"

    wrong_secret = jwt.encode({"sub": str(uuid.uuid4())}, "another-secret", algorithm="HS256")
    response = await test_async_client.post(
        SCOPE12_URL, json={}, headers={"Authorization": f"Bearer {wrong_secret}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_scope12_requires_organization_id(test_async_client, auth_headers):
    response = await test_async_client.post(
        SCOPE12_URL, json={}, headers=auth_headers(uuid.uuid4())
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Missing required field: organization_id"
    assert body["details"][0]["field"] == "organization_id"


@pytest.mark.asyncio
async def test_scope12_rejects_non_object_body(test_async_client, auth_headers):
    response = await test_async_client.post(
        SCOPE12_URL, json=["not", "an", "object"], headers=auth_headers(uuid.uuid4())
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Request body must be a JSON object"


@pytest.mark.asyncio
async def test_scope12_non_member_is_forbidden(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    await ActivityDataFactory(organization_id=member.organization_id)

    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(uuid.uuid4()),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "User is not a member of this organization"
    assert await count_rows(CalculatedEmissionDBModel) == 0


@pytest.mark.asyncio
async def test_scope12_nothing_to_process(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()

    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(member.user_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["calculations_performed"] == 0
    assert data["logs_created"] == 0
    assert data["message"] == "No unprocessed Scope 1 or Scope 2 activity data found"


@pytest.mark.asyncio
async def test_scope12_without_factors(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    await ActivityDataFactory(organization_id=member.organization_id)

    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(member.user_id),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "No emissions factors found in database"}


@pytest.mark.asyncio
async def test_scope12_grid_electricity_bill(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    await EmissionFactorFactory()
    activity = await ActivityDataFactory(
        organization_id=member.organization_id, facility_id=uuid.uuid4()
    )

    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(member.user_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["calculations_performed"] == 1
    assert data["logs_created"] == 1
    assert data["facilities_aggregated"] == 1
    assert data["details"]["unmatched_list"] == []

    async with Database() as session:
        emission = (await session.execute(select(CalculatedEmissionDBModel))).scalars().one()
        log = (await session.execute(select(CalculationLogDBModel))).scalars().one()

    assert emission.activity_data_id == activity.id
    assert float(emission.calculated_value_co2e) == pytest.approx(182.0)
    assert log.calculated_emission_id == emission.id
    assert log.user_id == member.user_id

    # Re-running processes nothing new
    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(member.user_id),
    )
    assert response.json()["calculations_performed"] == 0
    assert await count_rows(CalculationLogDBModel) == 1


@pytest.mark.asyncio
async def test_scope12_natural_gas_by_kwh(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    await NaturalGasFactorFactory(co2e_factor=Decimal("0.182"))
    facility_id = uuid.uuid4()
    activity = await NaturalGasActivityFactory(
        organization_id=member.organization_id,
        facility_id=facility_id,
        fuel_type="natural_gas_kwh",
        quantity=Decimal("1000"),
        unit="kWh",
    )

    response = await test_async_client.post(
        SCOPE12_URL,
        json={"organization_id": str(member.organization_id)},
        headers=auth_headers(member.user_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["calculations_performed"] == 1
    assert data["facilities_aggregated"] == 1

    async with Database() as session:
        emission = (await session.execute(select(CalculatedEmissionDBModel))).scalars().one()
        aggregate = (
            await session.execute(select(FacilityEmissionsAggregateDBModel))
        ).scalars().one()

    assert emission.activity_data_id == activity.id
    assert emission.scope == "1"
    assert Decimal(str(emission.calculated_value_co2e)) == Decimal("182")
    assert aggregate.facility_id == facility_id
    assert Decimal(str(aggregate.scope1_co2e)) == Decimal("182")
    assert Decimal(str(aggregate.scope2_co2e)) == Decimal("0")
    assert aggregate.activity_count == 1


@pytest.mark.asyncio
async def test_travel_spend_success(test_async_client, auth_headers):
    await TravelSpendFactorFactory()
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id),
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["emissions_tco2e"] == 0.000038
    assert data["metadata"]["spend_normalised_usd"] == 254.0
    assert data["metadata"]["exchange_rate_used"] == 1.27
    assert data["metadata"]["calculation_type"] == "Scope 3: Category 6 - Business Travel - Spend"

    async with Database() as session:
        log = await session.get(CalculationLogDBModel, uuid.UUID(data["calculation_log_id"]))
    assert log is not None
    assert log.organization_id == provenance.organization_id


@pytest.mark.asyncio
async def test_travel_spend_unsupported_currency(test_async_client, auth_headers):
    await TravelSpendFactorFactory()
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id, currency="XYZ"),
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error.startswith("Unsupported currency: XYZ")
    for code in ("USD", "EUR", "GBP", "JPY"):
        assert code in error
    assert await count_rows(CalculationLogDBModel) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "activity, message",
    [
        ({"spend": -10}, "activity_data.spend must be a positive number"),
        ({"spend": "200"}, None),
        ({"travel_type": "   "}, "activity_data.travel_type must be a non-empty string"),
    ],
)
async def test_travel_spend_invalid_activity(test_async_client, auth_headers, activity, message):
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id, **activity),
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 400
    if message:
        assert response.json()["error"] == message


@pytest.mark.asyncio
async def test_travel_spend_foreign_provenance(test_async_client, auth_headers):
    await TravelSpendFactorFactory()
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id),
        headers=auth_headers(uuid.uuid4(), uuid.uuid4()),
    )

    assert response.status_code == 404
    assert response.json()["error"].startswith("Invalid provenance_id")
    assert await count_rows(CalculationLogDBModel) == 0


@pytest.mark.asyncio
async def test_travel_spend_unknown_travel_type(test_async_client, auth_headers):
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id, travel_type="rail"),
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 404
    assert response.json()["error"] == (
        "No Scope 3 Category 6 business travel emissions factor found for travel type: rail"
    )


@pytest.mark.asyncio
async def test_single_shot_requires_active_organization(test_async_client, auth_headers):
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        TRAVEL_SPEND_URL,
        json=travel_payload(provenance.provenance_id),
        headers=auth_headers(provenance.user_id),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "No active organization for this user"


@pytest.mark.asyncio
async def test_stationary_combustion_success(test_async_client, auth_headers):
    await StationaryCombustionFactorFactory()
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        STATIONARY_URL,
        json={
            "provenance_id": str(provenance.provenance_id),
            "activity_data": {"fuel_type": "natural_gas", "fuel_energy_kwh": 12500},
        },
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["emissions_tco2e"] == 2.286625
    assert data["metadata"]["fuel_type"] == "natural_gas"
    assert data["metadata"]["factor_value"] == 0.18293
    assert await count_rows(CalculationLogDBModel) == 1


@pytest.mark.asyncio
async def test_stationary_combustion_missing_field(test_async_client, auth_headers):
    provenance = await DataProvenanceFactory()

    response = await test_async_client.post(
        STATIONARY_URL,
        json={"provenance_id": str(provenance.provenance_id), "activity_data": {"fuel_type": "lpg"}},
        headers=auth_headers(provenance.user_id, provenance.organization_id),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field: activity_data.fuel_energy_kwh"
