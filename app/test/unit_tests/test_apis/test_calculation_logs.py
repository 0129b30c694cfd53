"""
API tests for the calculation log endpoints.
"""
import uuid

import pytest
from sqlalchemy import text

from app.database.session_manager.db_session import Database
from app.test.factory.activity import ActivityDataFactory
from app.test.factory.emission_factor import EmissionFactorFactory
from app.test.factory.organization_member import OrganizationMemberFactory


async def run_batch(client, headers, organization_id):
    response = await client.post(
        "/api/v1/calculations/calculate-scope1-2",
        json={"organization_id": str(organization_id)},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_list_logs_newest_first(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    headers = auth_headers(member.user_id)
    await EmissionFactorFactory()
    await ActivityDataFactory.create_batch(3, organization_id=member.organization_id)
    await run_batch(test_async_client, headers, member.organization_id)

    response = await test_async_client.get(
        "/api/v1/calculation-logs/",
        params={"organization_id": str(member.organization_id)},
        headers=headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert [entry["sequence_number"] for entry in data] == [3, 2, 1]
    assert data[0]["previous_hash"] == data[1]["entry_hash"]
    assert all(entry["output_unit"] == "kgCO2e" for entry in data)

    response = await test_async_client.get(
        "/api/v1/calculation-logs/",
        params={"organization_id": str(member.organization_id), "skip": 1, "limit": 1},
        headers=headers,
    )
    assert [entry["sequence_number"] for entry in response.json()] == [2]


@pytest.mark.asyncio
async def test_list_logs_requires_membership(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()

    response = await test_async_client.get(
        "/api/v1/calculation-logs/",
        params={"organization_id": str(member.organization_id)},
        headers=auth_headers(uuid.uuid4()),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_verify_detects_tampering(test_async_client, auth_headers):
    member = await OrganizationMemberFactory()
    headers = auth_headers(member.user_id)
    await EmissionFactorFactory()
    await ActivityDataFactory.create_batch(2, organization_id=member.organization_id)
    await run_batch(test_async_client, headers, member.organization_id)

    params = {"organization_id": str(member.organization_id)}
    response = await test_async_client.get(
        "/api/v1/calculation-logs/verify", params=params, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["valid"] is True
    assert response.json()["entries_checked"] == 2

    async with Database() as session:
        await session.execute(
            text("UPDATE calculation_logs SET output_value = 1 WHERE sequence_number = 1")
        )

    response = await test_async_client.get(
        "/api/v1/calculation-logs/verify", params=params, headers=headers
    )
    data = response.json()
    assert data["valid"] is False
    assert data["broken_at_sequence"] == 1
