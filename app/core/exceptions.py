"""
Domain exceptions for the calculation engine.

Every exception raised across the API boundary carries the HTTP status it
maps to. Handlers registered in ``app.create_app`` turn them into structured
JSON bodies of the form ``{"error": ..., "details": ...}``.
"""
from typing import Any

from fastapi import status


class EngineError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthenticationError(EngineError):
    """Missing or invalid bearer credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(EngineError):
    """Authenticated user is not a member of the target organization."""

    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(EngineError):
    """Malformed request body or unsupported enumerated value."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(EngineError):
    """Unknown provenance record or no matching emission factor."""

    status_code = status.HTTP_404_NOT_FOUND


class ReferenceDataMissingError(EngineError):
    """No emission factors are loaded at all."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConcurrentBatchError(EngineError):
    """Another batch is already running for the organization."""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(EngineError):
    """
    A calculation or its audit log could not be written.

    The batch halts at the failing record. ``calculations_saved`` counts the
    activities committed before the fault and ``failed_at_index`` is the
    1-based position of the failing activity in the batch, so a re-run picks
    up exactly where this one stopped.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        calculations_saved: int,
        failed_at_index: int,
        failed_stage: str,
        details: Any = None,
    ):
        self.calculations_saved = calculations_saved
        self.failed_at_index = failed_at_index
        self.failed_stage = failed_stage
        super().__init__(message, details)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body.update(
            {
                "calculations_saved": self.calculations_saved,
                "failed_at_index": self.failed_at_index,
                "failed_stage": self.failed_stage,
            }
        )
        return body


class ImmutableLogError(EngineError):
    """Raised when code attempts to update or delete a calculation log."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
