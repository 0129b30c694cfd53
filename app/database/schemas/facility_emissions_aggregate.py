"""
FacilityEmissionsAggregate SQLAlchemy model.

Derived per (facility, reporting period) totals. Rows are overwritten with
the sum over all calculations on record, never incremented.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)

from app.database import Base


class FacilityEmissionsAggregateDBModel(Base):
    """Facility emissions total for one reporting period."""

    __tablename__ = "facility_emissions_aggregated"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    facility_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    reporting_period_start = Column(Date, nullable=False)
    reporting_period_end = Column(Date, nullable=False)

    total_co2e = Column(
        Numeric(24, 10),
        nullable=False,
        default=Decimal("0"),
        comment="Sum of calculated emissions in kgCO2e",
    )

    scope1_co2e = Column(Numeric(24, 10), nullable=False, default=Decimal("0"))
    scope2_co2e = Column(Numeric(24, 10), nullable=False, default=Decimal("0"))

    activity_count = Column(Integer, nullable=False, default=0)

    calculation_method = Column(
        String(100),
        nullable=False,
        comment="Calculation method tag (e.g., 'primary_verified_bills')",
    )

    results_payload = Column(JSON, nullable=True, default=dict)

    calculated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "organization_id",
            "facility_id",
            "reporting_period_start",
            "reporting_period_end",
            name="uq_facility_emissions_key",
        ),
        {"comment": "Facility emissions per reporting period"},
    )

    def __repr__(self):
        return (
            f"<FacilityEmissionsAggregateDBModel: {self.facility_id} "
            f"{self.reporting_period_start}..{self.reporting_period_end} = {self.total_co2e}>"
        )
