import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from customs_ops.application.interfaces.screening_gateway import ProviderError, ProviderResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

UNKNOWN_ERROR = "Unknown error"


async def guarded_call(call: Awaitable[ProviderResult], operation: str, **context: Any) -> ProviderResult:
    """
    Await a gateway call, converting any unexpected exception into a failed
    ProviderResult so callers can record it like any other provider failure.
    """
    try:
        return await call
    except Exception as exc:
        logger.exception(
            "Provider call raised unexpectedly",
            extra={"operation": operation, **context},
        )
        return ProviderResult.failed(code="NETWORK_ERROR", message=str(exc) or exc.__class__.__name__)


def describe_provider_error(error: ProviderError | None) -> str:
    """
    Human-readable message for a provider error.

    Prefers the nested `details.errors[]` list ("field: message" joined with
    "; "), then the top-level message, then "Unknown error".
    """
    if error is None:
        return UNKNOWN_ERROR
    nested = _nested_errors(error.details)
    if nested:
        return "; ".join(nested)
    return error.message or UNKNOWN_ERROR


def _nested_errors(details: dict[str, Any] | None) -> list[str]:
    if not isinstance(details, dict):
        return []
    errors = details.get("errors")
    if not isinstance(errors, list):
        return []
    messages = []
    for item in errors:
        if isinstance(item, dict):
            message = item.get("message") or item.get("description")
            if not message:
                continue
            field = item.get("field")
            messages.append(f"{field}: {message}" if field else str(message))
        elif item:
            messages.append(str(item))
    return messages


def parse_provider_data(
    result: ProviderResult, model: type[ModelT]
) -> tuple[ModelT | None, ProviderResult]:
    """
    Parse a successful result's payload into `model`.

    A 2xx whose body lacks the fields the caller depends on is turned into a
    failed result with code MALFORMED_RESPONSE, so it follows the same
    failure path as any other provider error.
    """
    if not result.success:
        return None, result
    try:
        return model.model_validate(result.data or {}), result
    except PydanticValidationError as exc:
        logger.warning(
            "Malformed provider response",
            extra={"model": model.__name__, "errors": exc.error_count()},
        )
        failed = ProviderResult.failed(
            code="MALFORMED_RESPONSE",
            message=f"Provider response is missing required fields for {model.__name__}",
            details=result.data if isinstance(result.data, dict) else None,
            http_status=result.http_status,
        )
        return None, failed
