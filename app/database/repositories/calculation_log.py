"""
Repository for CalculationLog database operations.

Read and append only; there is intentionally no update path for logs.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import CalculationLogDBModel


class CalculationLogRepository(BaseRepository[CalculationLogDBModel]):
    """Repository for calculation log operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(CalculationLogDBModel, session)

    async def get_chain_head(
        self, organization_id: UUID
    ) -> Optional[CalculationLogDBModel]:
        """
        Get the latest entry of an organization's audit chain.

        Args:
            organization_id: Owning organization

        Returns:
            Entry with the highest sequence number, None for an empty chain
        """
        stmt = (
            select(self.model)
            .where(self.model.organization_id == organization_id)
            .order_by(self.model.sequence_number.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_chain(self, organization_id: UUID) -> List[CalculationLogDBModel]:
        """Get the whole audit chain of an organization in append order."""
        stmt = (
            select(self.model)
            .where(self.model.organization_id == organization_id)
            .order_by(self.model.sequence_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_organization(
        self, organization_id: UUID, skip: int = 0, limit: int = 100
    ) -> List[CalculationLogDBModel]:
        """Get audit entries of an organization, newest first."""
        stmt = (
            select(self.model)
            .where(self.model.organization_id == organization_id)
            .order_by(self.model.sequence_number.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

