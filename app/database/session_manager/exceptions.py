"""
Session manager errors.

Both surface through the ``EngineError`` handler as structured JSON.
"""
from fastapi import status

from app.core.exceptions import EngineError


class DatabaseNotInitialized(EngineError):
    """``Database.init()`` was not called before a session was requested."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class DatabaseTransactionError(EngineError):
    """Commit or rollback of a unit of work failed."""
