"""
Pydantic models for facility emission aggregates.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FacilityEmissionsAggregatePydModel(BaseModel):
    """Facility/period total as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    facility_id: UUID
    reporting_period_start: date
    reporting_period_end: date
    total_co2e: Decimal = Field(..., description="Total emissions in kgCO2e")
    scope1_co2e: Decimal
    scope2_co2e: Decimal
    activity_count: int
    calculation_method: str
    results_payload: Optional[dict[str, Any]] = None
    calculated_at: datetime
