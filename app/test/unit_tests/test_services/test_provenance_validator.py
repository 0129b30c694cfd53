"""
Tests for provenance ownership checks.
"""
import uuid

import pytest

from app.core.exceptions import NotFoundError
from app.services.provenance.provenance_validator import (
    INVALID_PROVENANCE_MESSAGE,
    ProvenanceValidator,
)
from app.test.factory.provenance import DataProvenanceFactory


@pytest.mark.asyncio
async def test_valid_provenance_for_owner(test_db_session):
    provenance = await DataProvenanceFactory()

    record = await ProvenanceValidator(test_db_session).validate(
        str(provenance.provenance_id), provenance.organization_id
    )

    assert record.provenance_id == provenance.provenance_id
    assert record.storage_object_path == provenance.storage_object_path


@pytest.mark.asyncio
async def test_invalid_provenance_ids_are_indistinguishable(test_db_session):
    provenance = await DataProvenanceFactory()
    validator = ProvenanceValidator(test_db_session)

    claims = [
        (str(provenance.provenance_id), uuid.uuid4()),  # another tenant's record
        (str(uuid.uuid4()), provenance.organization_id),  # unknown record
        ("not-a-uuid", provenance.organization_id),  # malformed id
    ]

    for provenance_id, organization_id in claims:
        with pytest.raises(NotFoundError) as exc_info:
            await validator.validate(provenance_id, organization_id)
        assert exc_info.value.message == INVALID_PROVENANCE_MESSAGE
        assert exc_info.value.details is None
