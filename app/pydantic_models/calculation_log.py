"""
Pydantic models for audit log responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CalculationLogPydModel(BaseModel):
    """Audit log entry as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    log_id: UUID
    organization_id: UUID
    user_id: UUID
    calculated_emission_id: Optional[UUID] = None
    sequence_number: int
    input_data: dict[str, Any]
    output_value: Decimal
    output_unit: str
    methodology_version: str
    factor_ids_used: list[str]
    previous_hash: str
    entry_hash: str
    created_at: datetime


class ChainVerificationPydModel(BaseModel):
    """Result of recomputing an organization's audit chain."""

    organization_id: UUID
    valid: bool = Field(..., description="True when every entry hash recomputes")
    entries_checked: int = Field(..., examples=[42])
    broken_at_log_id: Optional[UUID] = Field(
        None, description="First entry whose hash or link does not match"
    )
    broken_at_sequence: Optional[int] = None
