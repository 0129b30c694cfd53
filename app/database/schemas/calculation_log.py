"""
CalculationLog SQLAlchemy model.

Append-only audit entries. Every entry is hash-chained to the previous entry
of the same organization, so any edit to a stored row is detectable.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    event,
)

from app.core.exceptions import ImmutableLogError
from app.database import Base


class CalculationLogDBModel(Base):
    """
    Immutable audit log for one calculation.

    Rows are inserted once and never updated or deleted. The ORM refuses both
    operations; on PostgreSQL a trigger refuses them as well.
    """

    __tablename__ = "calculation_logs"

    log_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    user_id = Column(Uuid(as_uuid=True), nullable=False)

    calculated_emission_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("calculated_emissions.id", ondelete="RESTRICT"),
        nullable=True,
        unique=True,
        comment="Calculation this entry audits (NULL for single-shot calculations)",
    )

    sequence_number = Column(
        Integer,
        nullable=False,
        comment="Position in the organization's audit chain (1-based)",
    )

    input_data = Column(
        JSON,
        nullable=False,
        comment="Full input snapshot including factor metadata",
    )

    output_value = Column(Numeric(24, 10), nullable=False)
    output_unit = Column(String(20), nullable=False)
    methodology_version = Column(String(200), nullable=False)

    factor_ids_used = Column(
        JSON,
        nullable=False,
        comment="Emission factor ids used in the calculation",
    )

    previous_hash = Column(String(64), nullable=False)
    entry_hash = Column(String(64), nullable=False, unique=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "sequence_number", name="uq_calculation_logs_org_sequence"
        ),
        CheckConstraint("output_value >= 0", name="ck_calculation_logs_output_non_negative"),
        CheckConstraint(
            "length(methodology_version) >= 3", name="ck_calculation_logs_methodology"
        ),
        Index("ix_calculation_logs_org_created", "organization_id", "created_at"),
        {"comment": "Append-only, hash-chained calculation audit trail"},
    )

    def __repr__(self):
        return f"<CalculationLogDBModel: #{self.sequence_number} {self.output_value} {self.output_unit}>"


@event.listens_for(CalculationLogDBModel, "before_update")
def _refuse_log_update(mapper, connection, target):
    raise ImmutableLogError(
        "Calculation logs are append-only", details={"log_id": str(target.log_id)}
    )


@event.listens_for(CalculationLogDBModel, "before_delete")
def _refuse_log_delete(mapper, connection, target):
    raise ImmutableLogError(
        "Calculation logs are append-only", details={"log_id": str(target.log_id)}
    )
