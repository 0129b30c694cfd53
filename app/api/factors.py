"""
Emission Factors API router.

Read-only operations for emission factors.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db_session
from app.core.exceptions import NotFoundError
from app.database.repositories import EmissionFactorRepository
from app.pydantic_models.emission_factor import EmissionFactorPydModel

router = APIRouter(
    prefix="/api/v1/factors",
    tags=["Emission Factors"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[EmissionFactorPydModel])
async def list_emission_factors(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    fuel_type: Optional[str] = None,
    factor_type: Optional[str] = None,
    scope: Optional[str] = Query(None, pattern="^[123]$"),
    factor_year: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """
    List emission factors with pagination and optional filtering.

    Args:
        skip: Number of records to skip
        limit: Maximum number of records to return
        fuel_type: Filter by factor key (optional)
        factor_type: Filter by factor family (optional)
        scope: Filter by GHG scope (optional)
        factor_year: Filter by publication year (optional)
    """
    return await EmissionFactorRepository(session).list_factors(
        skip=skip,
        limit=limit,
        fuel_type=fuel_type,
        factor_type=factor_type,
        scope=scope,
        factor_year=factor_year,
    )


@router.get("/{factor_id}", response_model=EmissionFactorPydModel)
async def get_emission_factor(
    factor_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get emission factor by ID.
    """
    factor = await EmissionFactorRepository(session).get_by_id(factor_id)

    if not factor:
        logger.info(f"Emission factor {factor_id} not found")
        raise NotFoundError(f"Emission factor {factor_id} not found")

    return factor
