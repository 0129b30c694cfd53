"""
Facilities API router.

Facility/period emission totals maintained by the Scope 1 & 2 batch.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    CurrentUser,
    ensure_membership,
    get_current_user,
    get_db_session,
)
from app.database.repositories import FacilityEmissionsAggregateRepository
from app.pydantic_models.facility_aggregate import FacilityEmissionsAggregatePydModel

router = APIRouter(
    prefix="/api/v1/facilities",
    tags=["Facilities"],
)


@router.get("/aggregates", response_model=list[FacilityEmissionsAggregatePydModel])
async def list_facility_aggregates(
    organization_id: UUID,
    facility_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List facility aggregates of an organization.

    Args:
        organization_id: Owning organization
        facility_id: Filter by facility (optional)
        skip: Number of records to skip
        limit: Maximum number of records to return
    """
    await ensure_membership(session, organization_id, user)
    return await FacilityEmissionsAggregateRepository(session).list_for_organization(
        organization_id, facility_id=facility_id, skip=skip, limit=limit
    )
