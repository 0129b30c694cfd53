"""
DataProvenance SQLAlchemy model.

Evidentiary records (uploaded invoices, spend proofs) that single-shot
calculations must reference.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, String, Uuid

from app.database import Base
from app.utils.constants import VerificationStatus


class DataProvenanceDBModel(Base):
    """Evidence record owned by one organization."""

    __tablename__ = "data_provenance_trail"

    provenance_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=False)

    source_description = Column(String(500), nullable=False)
    document_type = Column(String(100), nullable=False)

    storage_object_path = Column(
        String(1000),
        nullable=False,
        unique=True,
        comment="Object storage path of the uploaded evidence",
    )

    verification_status = Column(
        String(20),
        nullable=False,
        default=VerificationStatus.UNVERIFIED,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_data_provenance_org_created", "organization_id", "created_at"),
        {"comment": "Evidence records referenced by calculations"},
    )

    def __repr__(self):
        return f"<DataProvenanceDBModel: {self.document_type} {self.provenance_id}>"
