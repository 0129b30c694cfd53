"""
Base factory for async SQLAlchemy models.
"""
import asyncio
import inspect
from typing import Any

import factory
from factory.alchemy import SQLAlchemyOptions
from sqlalchemy import select


class AsyncSQLAlchemyFactory(factory.Factory):
    """
    Base factory for creating async SQLAlchemy model instances.

    Every instance is written and committed in its own session, so tests can
    hand the rows to the API or to a service session straight away.
    """

    _options_class = SQLAlchemyOptions

    class Meta:
        abstract = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """
        Schedule the insert and return the task.

        ``await Factory(...)`` yields the committed instance. A Task can be
        awaited more than once, unlike a bare coroutine.
        """

        async def maker_coroutine():
            for key, value in kwargs.items():
                if inspect.isawaitable(value):
                    kwargs[key] = await value

            if cls._meta.sqlalchemy_get_or_create:
                return await cls._get_or_create(model_class, *args, **kwargs)
            return await cls._save(model_class, *args, **kwargs)

        return asyncio.create_task(maker_coroutine())

    @classmethod
    async def _get_or_create(cls, model_class, *args, **kwargs) -> Any:
        """Return the row matching the ``sqlalchemy_get_or_create`` fields, or insert it."""
        lookup = {
            field: kwargs[field]
            for field in cls._meta.sqlalchemy_get_or_create
            if field in kwargs
        }

        async with cls._meta.sqlalchemy_session() as session:
            stmt = select(model_class).filter_by(**lookup)
            instance = (await session.execute(stmt)).scalars().first()

        if instance is not None:
            return instance
        return await cls._save(model_class, *args, **kwargs)

    @classmethod
    async def _save(cls, model_class, *args, **kwargs) -> Any:
        async with cls._meta.sqlalchemy_session() as session:
            obj = model_class(*args, **kwargs)
            session.add(obj)
            await session.commit()
            return obj

    @classmethod
    async def create_batch(cls, size: int, **kwargs) -> list[Any]:
        """
        Create multiple instances, one commit each.

        Args:
            size: Number of instances to create
            **kwargs: Attributes to set on all instances
        """
        return [await cls.create(**kwargs) for _ in range(size)]
