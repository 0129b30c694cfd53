"""
Calculation Logs API router.

Read-only access to an organization's audit trail.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    CurrentUser,
    ensure_membership,
    get_current_user,
    get_db_session,
)
from app.database.repositories import CalculationLogRepository
from app.pydantic_models.calculation_log import (
    CalculationLogPydModel,
    ChainVerificationPydModel,
)
from app.services.audit.calculation_logger import CalculationAuditLogger

router = APIRouter(
    prefix="/api/v1/calculation-logs",
    tags=["Calculation Logs"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[CalculationLogPydModel])
async def list_calculation_logs(
    organization_id: UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List audit entries of an organization, newest first.

    Args:
        organization_id: Organization whose trail is listed
        skip: Number of records to skip
        limit: Maximum number of records to return
    """
    await ensure_membership(session, organization_id, user)
    return await CalculationLogRepository(session).list_for_organization(
        organization_id, skip=skip, limit=limit
    )


@router.get("/verify", response_model=ChainVerificationPydModel)
async def verify_calculation_logs(
    organization_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Recompute the hash chain of an organization's audit trail."""
    await ensure_membership(session, organization_id, user)
    result = await CalculationAuditLogger(session).verify_chain(organization_id)
    logger.info(
        f"Audit chain for organization {organization_id}: "
        f"{'valid' if result.valid else 'BROKEN'} ({result.entries_checked} entries checked)"
    )
    return result
