"""Response envelope shared by every API endpoint.

Success: ``{"success": true, "data": ...}``
Failure: ``{"success": false, "error": "...", "details": {...}}``
"""

from __future__ import annotations

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(
    data: Any = None, status: int = http_status.HTTP_200_OK, message: str = ""
) -> Response:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return Response(body, status=status)


def error_response(
    error: str,
    status: int = http_status.HTTP_400_BAD_REQUEST,
    details: Optional[Any] = None,
) -> Response:
    body: dict[str, Any] = {"success": False, "error": error}
    if details:
        body["details"] = details
    return Response(body, status=status)
