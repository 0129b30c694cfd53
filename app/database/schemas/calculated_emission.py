"""
CalculatedEmission SQLAlchemy model.

One row per processed activity. Its existence is the marker that an
activity has already been processed.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from app.database import Base


class CalculatedEmissionDBModel(Base):
    """Calculated emission for a single activity record."""

    __tablename__ = "calculated_emissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    activity_data_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("activity_data.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
        comment="Processed activity (at most one calculation per activity)",
    )

    emissions_factor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("emission_factors.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Emission factor used in the calculation",
    )

    calculated_value_co2e = Column(
        Numeric(24, 10),
        nullable=False,
        comment="Calculated emissions in kgCO2e (unrounded)",
    )

    scope = Column(String(1), nullable=False, comment="GHG Protocol scope ('1' or '2')")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    activity = relationship("ActivityDataDBModel", lazy="raise")
    emission_factor = relationship("EmissionFactorDBModel", lazy="raise")

    __table_args__ = (
        Index("ix_calculated_emissions_org_created", "organization_id", "created_at"),
        {"comment": "Calculated emissions per activity record"},
    )

    def __repr__(self):
        return f"<CalculatedEmissionDBModel: {self.calculated_value_co2e} kgCO2e (scope {self.scope})>"

