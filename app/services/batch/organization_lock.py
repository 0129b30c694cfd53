"""
Per-organization batch lock.

On PostgreSQL a session-level advisory lock is taken on a dedicated
connection, so it spans the many commits a batch performs and is shared by
every worker process. Other backends fall back to an in-process registry.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.core.exceptions import ConcurrentBatchError
from app.utils.constants import BATCH_LOCK_NAMESPACE

logger = logging.getLogger(__name__)


class OrganizationBatchLock:
    """
    Async context manager guarding one organization's batch.

    Raises ConcurrentBatchError on entry when the lock is already held.
    """

    _held_locally: set[str] = set()

    def __init__(self, engine: AsyncEngine, organization_id: UUID):
        self.engine = engine
        self.key = str(organization_id)
        self._connection: Optional[AsyncConnection] = None

    @property
    def _uses_advisory_lock(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    def _busy(self) -> ConcurrentBatchError:
        logger.warning(f"Batch already running for organization {self.key}")
        return ConcurrentBatchError(
            "A calculation batch is already running for this organization",
            details={"organization_id": self.key},
        )

    async def __aenter__(self) -> "OrganizationBatchLock":
        if not self._uses_advisory_lock:
            if self.key in self._held_locally:
                raise self._busy()
            self._held_locally.add(self.key)
            return self

        self._connection = await self.engine.connect()
        acquired = (
            await self._connection.execute(
                text("SELECT pg_try_advisory_lock(:namespace, hashtext(:key))"),
                {"namespace": BATCH_LOCK_NAMESPACE, "key": self.key},
            )
        ).scalar()
        if not acquired:
            await self._connection.close()
            self._connection = None
            raise self._busy()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._uses_advisory_lock:
            self._held_locally.discard(self.key)
            return

        try:
            await self._connection.execute(
                text("SELECT pg_advisory_unlock(:namespace, hashtext(:key))"),
                {"namespace": BATCH_LOCK_NAMESPACE, "key": self.key},
            )
            await self._connection.commit()
        finally:
            await self._connection.close()
            self._connection = None
