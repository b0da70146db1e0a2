"""DRF exception handler producing the standard error envelope."""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


def _first_message(detail: Any) -> str:
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    if isinstance(detail, dict) and detail:
        return _first_message(next(iter(detail.values())))
    return str(detail)


def envelope_exception_handler(exc, context):
    """Wrap framework errors (validation, auth, throttling, 404) in the envelope."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        message = "Validation failed"
        details = exc.detail if isinstance(exc.detail, dict) else {"non_field_errors": exc.detail}
    else:
        detail = getattr(exc, "detail", response.data)
        message = _first_message(detail)
        details = None

    view = context.get("view")
    logger.info(
        "api.request_rejected",
        view=type(view).__name__ if view else None,
        status_code=response.status_code,
        error=message,
    )

    body: dict[str, Any] = {"success": False, "error": message}
    if details:
        body["details"] = details
    response.data = body
    return response
