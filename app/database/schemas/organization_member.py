"""
OrganizationMember SQLAlchemy model.

Minimal view of the organization membership model used for access checks.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint, Uuid

from app.database import Base


class OrganizationMemberDBModel(Base):
    __tablename__ = "organization_members"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(String(50), nullable=False, default="member")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_members"),
        {"comment": "Organization membership"},
    )

    def __repr__(self):
        return f"<OrganizationMemberDBModel: {self.user_id} in {self.organization_id}>"
