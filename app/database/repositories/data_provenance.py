"""
Repository for DataProvenance database operations.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import DataProvenanceDBModel


class DataProvenanceRepository(BaseRepository[DataProvenanceDBModel]):
    """Repository for provenance record operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(DataProvenanceDBModel, session)

    async def get_for_organization(
        self, provenance_id: UUID, organization_id: UUID
    ) -> Optional[DataProvenanceDBModel]:
        """
        Get a provenance record only if it belongs to the organization.

        Args:
            provenance_id: Provenance record id
            organization_id: Requesting organization

        Returns:
            The record, or None when it is unknown or owned by another tenant
        """
        stmt = select(self.model).where(
            self.model.provenance_id == provenance_id,
            self.model.organization_id == organization_id,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
