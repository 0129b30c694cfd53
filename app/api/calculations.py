"""
Emissions Calculations API router.

Scope 1 & 2 batch over stored activities, plus single-shot calculations
computed from the request body.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    CurrentUser,
    ensure_membership,
    get_current_user,
    get_db_session,
    get_engine_settings,
    get_reference_tables,
)
from app.core.validation import validate_payload
from app.pydantic_models.calculation import (
    Scope12BatchRequest,
    Scope12BatchResponse,
    StationaryCombustionRequest,
    StationaryCombustionResponse,
    TravelSpendRequest,
    TravelSpendResponse,
)
from app.pydantic_models.reference_tables import EngineSettings, ReferenceTables
from app.services.batch.scope12_orchestrator import Scope12BatchOrchestrator
from app.services.calculators.stationary_combustion_calculator import (
    StationaryCombustionCalculator,
)
from app.services.calculators.travel_spend_calculator import TravelSpendCalculator

router = APIRouter(
    prefix="/api/v1/calculations",
    tags=["Calculations"],
)

logger = logging.getLogger(__name__)


@router.post("/calculate-scope1-2", response_model=Scope12BatchResponse)
async def calculate_scope1_2(
    payload: Any = Body(None),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    reference_tables: ReferenceTables = Depends(get_reference_tables),
    settings: EngineSettings = Depends(get_engine_settings),
):
    """
    Calculate Scope 1 & 2 emissions for every unprocessed activity of an organization.

    This endpoint will:
    1. Check the caller is a member of the organization
    2. Map each activity to a fuel type and resolve its emission factor
    3. Persist each calculation together with its audit log entry
    4. Refresh the facility aggregates and return a summary

    Example:
        ```
        POST /api/v1/calculations/calculate-scope1-2
        {"organization_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6"}
        ```
    """
    request = validate_payload(Scope12BatchRequest, payload)
    await ensure_membership(session, request.organization_id, user)

    logger.info(
        f"Scope 1/2 batch requested for organization {request.organization_id} by {user.user_id}"
    )
    orchestrator = Scope12BatchOrchestrator(session, reference_tables, settings)
    return await orchestrator.run(request.organization_id, user.user_id)


@router.post("/calculate-scope3-travel-spend", response_model=TravelSpendResponse)
async def calculate_scope3_travel_spend(
    payload: Any = Body(None),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    reference_tables: ReferenceTables = Depends(get_reference_tables),
    settings: EngineSettings = Depends(get_engine_settings),
):
    """
    Calculate Scope 3 Category 6 emissions from a business travel spend.

    Example:
        ```
        POST /api/v1/calculations/calculate-scope3-travel-spend
        {
            "provenance_id": "7b2c91f3-8a45-4d21-9e76-1f8d3c5a9b42",
            "activity_data": {"travel_type": "flight_economy_short_haul", "spend": 200, "currency": "GBP"}
        }
        ```
    """
    request = validate_payload(
        TravelSpendRequest,
        payload,
        context={"supported_currencies": reference_tables.exchange_rates.supported_currencies},
    )
    organization_id = user.require_organization()

    calculator = TravelSpendCalculator(session, reference_tables, settings)
    return await calculator.calculate(request, organization_id, user.user_id)


@router.post(
    "/calculate-scope1-stationary-combustion", response_model=StationaryCombustionResponse
)
async def calculate_scope1_stationary_combustion(
    payload: Any = Body(None),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    reference_tables: ReferenceTables = Depends(get_reference_tables),
    settings: EngineSettings = Depends(get_engine_settings),
):
    """Calculate Scope 1 emissions from fuel energy burnt on site."""
    request = validate_payload(StationaryCombustionRequest, payload)
    organization_id = user.require_organization()

    calculator = StationaryCombustionCalculator(session, reference_tables, settings)
    return await calculator.calculate(request, organization_id, user.user_id)
