"""
Base repository.

Generic insert and primary-key lookup shared by every repository. There is
no generic update or delete: calculations and audit entries are written once,
and reference data is managed by the seeding flow.
"""
from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Base repository for one SQLAlchemy model.

    The primary key column is read from the mapper, so models keyed by
    ``log_id`` or ``provenance_id`` work the same as models keyed by ``id``.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session
        self.pk_column = inspect(model).primary_key[0]

    async def create(self, **data: Any) -> ModelType:
        """
        Add a record and flush it; the caller commits.

        Args:
            **data: Column values for the new record

        Returns:
            Flushed model instance with server defaults loaded
        """
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get record by primary key.

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.pk_column == id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
