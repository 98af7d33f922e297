"""Domain error taxonomy and the JSON error envelope."""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse


class DomainError(Exception):
    """Base error raised by the gateway and device services.

    Every error carries a stable ``kind`` that the HTTP layer maps to a
    status code, and a message safe to show to API callers.
    """

    kind = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a referenced gateway, device or device type does not exist."""

    kind = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """Raised when a serial number, IP address or device uid is already taken."""

    kind = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class BadRequestError(DomainError):
    """Raised when a request breaks a business rule (device cap, wrong gateway)."""

    kind = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(DomainError):
    """Raised when the store contradicts a check that already passed."""


def error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build standard error envelope response."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=payload)
