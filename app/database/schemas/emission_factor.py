"""
EmissionFactor SQLAlchemy model.

Versioned reference factors (DEFRA conversion factors and spend-based
factors), keyed by fuel type, year and geography.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)

from app.database import Base
from app.utils.constants import FactorType


class EmissionFactorDBModel(Base):
    """
    Emission factor reference datum.

    Several years and geographies may exist for one fuel type; the factor
    resolver selects exactly one per calculation.
    """

    __tablename__ = "emission_factors"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    fuel_type = Column(
        String(100),
        nullable=False,
        index=True,
        comment="Factor key (e.g., 'natural_gas_kwh', 'flight_economy_short_haul')",
    )

    fuel_type_display = Column(
        String(200),
        nullable=True,
        comment="Human readable name",
    )

    factor_type = Column(
        String(100),
        nullable=False,
        default=FactorType.ENERGY,
        comment="Factor family (energy, Stationary Combustion - Energy, Category 6 spend)",
    )

    factor_year = Column(
        Integer,
        nullable=False,
        comment="Publication year of the factor",
    )

    co2e_factor = Column(
        Numeric(18, 8),
        nullable=False,
        comment="kgCO2e per factor unit",
    )

    factor_unit = Column(
        String(50),
        nullable=False,
        comment="Unit the factor applies to (e.g., kWh, litre, USD)",
    )

    scope = Column(
        String(1),
        nullable=False,
        comment="GHG Protocol scope ('1', '2' or '3')",
    )

    category = Column(String(100), nullable=True)
    subcategory = Column(String(100), nullable=True)

    geographic_scope = Column(
        String(50),
        nullable=False,
        default="UK",
        comment="Geography the factor was published for",
    )

    source = Column(
        String(200),
        nullable=True,
        comment="Source of the emission factor (e.g., 'DEFRA 2024')",
    )

    source_url = Column(String(500), nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "fuel_type",
            "factor_year",
            "geographic_scope",
            "factor_type",
            name="uq_emission_factors_fuel_year_geo_type",
        ),
        CheckConstraint("co2e_factor >= 0", name="ck_emission_factors_non_negative"),
        CheckConstraint(
            "factor_year BETWEEN 2000 AND 2100", name="ck_emission_factors_year_range"
        ),
        CheckConstraint("scope IN ('1', '2', '3')", name="ck_emission_factors_scope"),
        Index("ix_emission_factors_type_fuel", "factor_type", "fuel_type"),
        {"comment": "Emission factor reference data for CO2e calculations"},
    )

    def __repr__(self):
        return f"<EmissionFactorDBModel: {self.fuel_type} {self.factor_year} ({self.geographic_scope})>"
