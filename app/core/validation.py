"""
Single-step request validation.

Turns a raw JSON body into a validated pydantic model or raises the domain
``ValidationError`` before any business logic runs.
"""
import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def error_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``{"field", "message"}`` pairs."""
    details = []
    for error in errors:
        message = error.get("msg", "")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append(
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": message,
            }
        )
    return details


def validate_payload(
    model: Type[ModelT], payload: Any, context: Optional[dict[str, Any]] = None
) -> ModelT:
    """
    Validate a request body against a model.

    Args:
        model: Pydantic model describing the body
        payload: Decoded JSON body (may be None or a non-object)
        context: Validation context passed to field validators

    Returns:
        Validated model instance

    Raises:
        ValidationError: With the first error as message and all errors as details
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return model.model_validate(payload, context=context)
    except PydanticValidationError as e:
        details = error_details(e.errors())
        logger.info(f"Rejected {model.__name__} payload: {details}")
        first = details[0]
        message = first["message"]
        if first["message"] == "Field required":
            message = f"Missing required field: {first['field']}"
        raise ValidationError(message, details=details) from e
