"""
Factory for evidence records.
"""
import uuid
from datetime import datetime

import factory

from app.database.schemas import DataProvenanceDBModel
from app.test.factory.base_factory import AsyncSQLAlchemyFactory
from app.test.factory.create_async_session import async_session
from app.utils.constants import VerificationStatus


class DataProvenanceFactory(AsyncSQLAlchemyFactory):
    class Meta:
        model = DataProvenanceDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    provenance_id = factory.LazyFunction(uuid.uuid4)
    organization_id = factory.LazyFunction(uuid.uuid4)
    user_id = factory.LazyFunction(uuid.uuid4)
    source_description = "Travel agency invoice"
    document_type = "invoice"
    storage_object_path = factory.Sequence(lambda n: f"evidence/invoices/{n}.pdf")
    verification_status = VerificationStatus.VERIFIED
    created_at = factory.LazyFunction(datetime.utcnow)
