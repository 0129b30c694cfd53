"""
Repository for EmissionFactor database operations.

Handles all database interactions for emission factors.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import EmissionFactorDBModel
from app.utils.constants import FactorType, Scope


class EmissionFactorRepository(BaseRepository[EmissionFactorDBModel]):
    """Repository for emission factor operations."""

    def __init__(self, session: AsyncSession):
        """
        Initialize emission factor repository.

        Args:
            session: Async database session
        """
        super().__init__(EmissionFactorDBModel, session)

    async def get_energy_factors(self) -> List[EmissionFactorDBModel]:
        """
        Get all Scope 1 and Scope 2 energy factors used by the batch engine.

        Returns:
            Factors ordered by fuel type and year
        """
        stmt = (
            select(self.model)
            .where(
                self.model.factor_type == FactorType.ENERGY,
                self.model.scope.in_([Scope.SCOPE_1, Scope.SCOPE_2]),
            )
            .order_by(self.model.fuel_type, self.model.factor_year)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest_by_type_and_name(
        self, factor_type: str, fuel_type: str
    ) -> Optional[EmissionFactorDBModel]:
        """
        Get the most recently published factor of a family for one key.

        Args:
            factor_type: Factor family (e.g., FactorType.BUSINESS_TRAVEL_SPEND)
            fuel_type: Factor key (e.g., 'flight_economy_short_haul')

        Returns:
            Factor with the highest factor_year, None if none exists
        """
        stmt = select(self.model).where(
            self.model.factor_type == factor_type,
            self.model.fuel_type == fuel_type,
        )
        stmt = stmt.order_by(self.model.factor_year.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_factors(
        self,
        skip: int = 0,
        limit: int = 100,
        fuel_type: Optional[str] = None,
        factor_type: Optional[str] = None,
        scope: Optional[str] = None,
        factor_year: Optional[int] = None,
    ) -> List[EmissionFactorDBModel]:
        """
        List factors with optional filters.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            fuel_type: Filter by factor key
            factor_type: Filter by factor family
            scope: Filter by GHG scope
            factor_year: Filter by publication year

        Returns:
            List of matching emission factors
        """
        stmt = select(self.model)
        if fuel_type:
            stmt = stmt.where(self.model.fuel_type == fuel_type)
        if factor_type:
            stmt = stmt.where(self.model.factor_type == factor_type)
        if scope is not None:
            stmt = stmt.where(self.model.scope == scope)
        if factor_year is not None:
            stmt = stmt.where(self.model.factor_year == factor_year)

        stmt = (
            stmt.order_by(self.model.fuel_type, self.model.factor_year.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
