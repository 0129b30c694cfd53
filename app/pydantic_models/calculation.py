"""
Pydantic models for calculation requests and responses.

Request bodies are validated in one step by ``app.core.validation.validate_payload``
with a context carrying the supported currency set, so the error message
can enumerate it.
"""
from typing import Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    ValidationInfo,
    field_validator,
)


class Scope12BatchRequest(BaseModel):
    """Request model for the Scope 1 & 2 batch."""

    model_config = ConfigDict(extra="ignore")

    organization_id: UUID = Field(
        ...,
        description="Organization whose unprocessed activities are calculated",
        examples=["3fa85f64-5717-4562-b3fc-2c963f66afa6"],
    )


class TravelSpendActivity(BaseModel):
    travel_type: str = Field(
        ...,
        min_length=1,
        description="Spend-based travel factor key",
        examples=["flight_economy_short_haul"],
    )
    spend: StrictInt | StrictFloat = Field(
        ..., description="Amount spent in the given currency", examples=[200]
    )
    currency: str = Field(..., min_length=1, description="ISO currency code", examples=["GBP"])

    @field_validator("travel_type")
    @classmethod
    def travel_type_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("activity_data.travel_type must be a non-empty string")
        return value.strip()

    @field_validator("spend")
    @classmethod
    def spend_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("activity_data.spend must be a positive number")
        return value

    @field_validator("currency")
    @classmethod
    def currency_supported(cls, value: str, info: ValidationInfo) -> str:
        code = value.strip().upper()
        supported = (info.context or {}).get("supported_currencies")
        if supported is not None and code not in supported:
            raise ValueError(
                f"Unsupported currency: {value}. "
                f"Supported currencies: {', '.join(supported)}"
            )
        return code


class TravelSpendRequest(BaseModel):
    """Request model for a Scope 3 Category 6 spend-based calculation."""

    provenance_id: str = Field(
        ...,
        min_length=1,
        description="Evidence record backing the spend",
        examples=["7b2c91f3-8a45-4d21-9e76-1f8d3c5a9b42"],
    )
    activity_data: TravelSpendActivity


class StationaryCombustionActivity(BaseModel):
    fuel_type: str = Field(..., min_length=1, examples=["natural_gas"])
    fuel_energy_kwh: StrictInt | StrictFloat = Field(..., examples=[12500])

    @field_validator("fuel_type")
    @classmethod
    def fuel_type_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("activity_data.fuel_type must be a non-empty string")
        return value.strip()

    @field_validator("fuel_energy_kwh")
    @classmethod
    def energy_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("activity_data.fuel_energy_kwh must be a positive number")
        return value


class StationaryCombustionRequest(BaseModel):
    """Request model for a Scope 1 stationary combustion calculation."""

    provenance_id: str = Field(..., min_length=1)
    activity_data: StationaryCombustionActivity


class UnmatchedActivity(BaseModel):
    activity_id: UUID
    name: str
    fuel_type: Optional[str] = None
    resolved_fuel_type: Optional[str] = None
    unit: str
    reason: str
    details: Optional[str] = None


class BatchDetails(BaseModel):
    total_unprocessed: int = 0
    matched: int = 0
    unmatched: int = 0
    unmatched_list: list[UnmatchedActivity] = Field(default_factory=list)


class Scope12BatchResponse(BaseModel):
    """Summary returned by the Scope 1 & 2 batch."""

    success: bool
    message: str
    calculations_performed: int = Field(..., examples=[12])
    logs_created: int = Field(..., examples=[12])
    facilities_aggregated: int = Field(0, examples=[3])
    unmatched_activities: int = Field(0, examples=[1])
    details: BatchDetails = Field(default_factory=BatchDetails)


class SingleShotMetadata(BaseModel):
    """Factor and conversion metadata reported for transparency."""

    model_config = ConfigDict(extra="allow")

    factor_value: float
    factor_unit: str
    factor_source: Optional[str] = None
    factor_year: int
    methodology: str
    engine_version: str
    calculation_type: str


class TravelSpendMetadata(SingleShotMetadata):
    travel_type: str
    spend_original: float
    currency_original: str
    spend_normalised_usd: float
    exchange_rate_used: float


class StationaryCombustionMetadata(SingleShotMetadata):
    fuel_type: str
    fuel_energy_kwh: float


class TravelSpendResponse(BaseModel):
    emissions_tco2e: float = Field(..., examples=[0.000038])
    calculation_log_id: UUID
    metadata: TravelSpendMetadata


class StationaryCombustionResponse(BaseModel):
    emissions_tco2e: float = Field(..., examples=[2.286625])
    calculation_log_id: UUID
    metadata: StationaryCombustionMetadata
