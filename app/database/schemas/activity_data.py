"""
ActivityData SQLAlchemy model.

Organization-scoped activity records (fuel use, purchased energy, spend)
created by data-entry flows and consumed by the calculation engine.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Index, Numeric, String, Uuid

from app.database import Base


class ActivityDataDBModel(Base):
    """
    Activity record.

    The engine reads these rows and never mutates them. An activity is
    "processed" once a CalculatedEmissionDBModel references it.
    """

    __tablename__ = "activity_data"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="Owning organization",
    )

    name = Column(
        String(255),
        nullable=False,
        comment="Free-text activity name (e.g., 'Natural gas - Main site')",
    )

    category = Column(
        String(100),
        nullable=False,
        comment="GHG category (Scope 1, Scope 2 or a Scope 3 subtype)",
    )

    quantity = Column(
        Numeric(20, 6),
        nullable=False,
        comment="Consumed quantity in the recorded unit",
    )

    unit = Column(
        String(50),
        nullable=False,
        comment="Unit as recorded by the user (e.g., 'litres', 'kWh')",
    )

    fuel_type = Column(
        String(100),
        nullable=True,
        comment="Utility label or factor key (e.g., 'electricity_grid')",
    )

    facility_id = Column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
        comment="Facility the activity belongs to",
    )

    reporting_period_start = Column(Date, nullable=True)
    reporting_period_end = Column(Date, nullable=True)

    activity_date = Column(
        Date,
        nullable=True,
        comment="Date the activity occurred (bill date)",
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_activity_data_org_category", "organization_id", "category"),
        Index(
            "ix_activity_data_facility_period",
            "facility_id",
            "reporting_period_start",
            "reporting_period_end",
        ),
        {"comment": "Organization activity data consumed by the calculation engine"},
    )

    def __repr__(self):
        return f"<ActivityDataDBModel: {self.name} - {self.quantity} {self.unit}>"
