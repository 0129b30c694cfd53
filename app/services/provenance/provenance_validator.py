"""
Provenance validation.

Confirms that the evidence record a calculation cites exists and belongs to
the requesting organization. Unknown, malformed and foreign ids all produce
the same error so one tenant cannot discover another's records.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.database.repositories import DataProvenanceRepository
from app.database.schemas import DataProvenanceDBModel

logger = logging.getLogger(__name__)

INVALID_PROVENANCE_MESSAGE = (
    "Invalid provenance_id: No matching evidence record found or access denied"
)


class ProvenanceValidator:
    """Service for checking provenance ownership."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = DataProvenanceRepository(session)

    async def validate(
        self, provenance_id: str | UUID, organization_id: UUID
    ) -> DataProvenanceDBModel:
        """
        Resolve a provenance record for an organization.

        Args:
            provenance_id: Claimed evidence record id (may be malformed)
            organization_id: Requesting organization

        Returns:
            The provenance record

        Raises:
            NotFoundError: If the id is malformed, unknown or owned by another organization
        """
        try:
            provenance_uuid = (
                provenance_id if isinstance(provenance_id, UUID) else UUID(str(provenance_id))
            )
        except ValueError:
            logger.info(f"Rejected malformed provenance id '{provenance_id}'")
            raise NotFoundError(INVALID_PROVENANCE_MESSAGE) from None

        record = await self.repo.get_for_organization(provenance_uuid, organization_id)
        if record is None:
            logger.info(
                f"Provenance {provenance_uuid} not found for organization {organization_id}"
            )
            raise NotFoundError(INVALID_PROVENANCE_MESSAGE)

        return record
