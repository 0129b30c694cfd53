"""
Reference tables and engine settings loaded from configuration.

The fuel-type mapping, the keyword rules and the exchange-rate table are
versioned alongside the config files and injected into the services.
"""
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import Config


class FuelTypeMappingEntry(BaseModel):
    """Factor key and scope for a utility label."""

    model_config = ConfigDict(frozen=True)

    fuel_type: str = Field(..., min_length=1, examples=["grid_electricity"])
    scope: Literal["1", "2"] = Field(..., examples=["2"])


class FuelKeywordRule(BaseModel):
    """Keyword matched against an activity name when no label is recorded."""

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(..., min_length=1)
    fuel_type: str = Field(..., min_length=1)
    unit: Optional[str] = Field(
        None, description="Only apply when the normalized activity unit equals this"
    )

    @field_validator("keyword")
    @classmethod
    def lower_keyword(cls, value: str) -> str:
        return value.lower()


class ExchangeRateTable(BaseModel):
    """Fixed conversion rates into the reference currency."""

    reference_currency: str = "USD"
    rates: dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("rates")
    @classmethod
    def upper_currency_codes(cls, value: dict[str, Decimal]) -> dict[str, Decimal]:
        return {code.upper(): rate for code, rate in value.items()}

    @property
    def supported_currencies(self) -> list[str]:
        return list(self.rates.keys())

    def rate_for(self, currency: str) -> Optional[Decimal]:
        return self.rates.get(currency.upper())


class ReferenceTables(BaseModel):
    """Static lookup tables injected into the calculation services."""

    fuel_type_mapping: dict[str, FuelTypeMappingEntry] = Field(default_factory=dict)
    fuel_type_keywords: list[FuelKeywordRule] = Field(default_factory=list)
    exchange_rates: ExchangeRateTable = Field(default_factory=ExchangeRateTable)

    @classmethod
    def from_config(cls, config: Config) -> "ReferenceTables":
        return cls(
            fuel_type_mapping=config.section("fuel_type_mapping"),
            fuel_type_keywords=config.data.get("fuel_type_keywords", []),
            exchange_rates=config.section("exchange_rates"),
        )


class EngineSettings(BaseModel):
    """Tunables of the calculation engine."""

    fuzzy_match_threshold: int = Field(80, ge=0, le=100)
    default_geographic_scope: str = "UK"
    engine_version: str = "1.0.0"
    scope12_methodology_version: str = Field(..., min_length=3)
    travel_spend_methodology_version: str = Field(..., min_length=3)
    stationary_combustion_methodology_version: str = Field(..., min_length=3)
    aggregation_method: str = "primary_verified_bills"

    @classmethod
    def from_config(cls, config: Config) -> "EngineSettings":
        return cls(**config.section("emission_calculation"))
