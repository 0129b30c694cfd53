"""
Pydantic models for EmissionFactor.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EmissionFactorBase(BaseModel):
    """Base emission factor model."""

    fuel_type: str = Field(..., max_length=100, description="Factor key")
    fuel_type_display: Optional[str] = Field(None, max_length=200)
    factor_type: str = Field(..., max_length=100, description="Factor family")
    factor_year: int = Field(..., ge=2000, le=2100, description="Publication year")
    co2e_factor: Decimal = Field(..., ge=0, description="kgCO2e per factor unit")
    factor_unit: str = Field(..., max_length=50, description="Unit of measurement")
    scope: str = Field(..., pattern="^[123]$", description="GHG Protocol scope ('1', '2' or '3')")
    category: Optional[str] = Field(None, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    geographic_scope: str = Field("UK", max_length=50)
    source: Optional[str] = Field(None, max_length=200, description="Source of emission factor")
    source_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, description="Additional notes")


class EmissionFactorPydModel(EmissionFactorBase):
    """Model for emission factor response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
