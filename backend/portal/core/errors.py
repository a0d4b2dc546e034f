"""
Centralized error handling for store/API failures.
Exception types and user-facing messages live here so routes stay thin and never leak internals.
"""
from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StoreError(Exception):
    """Any failure talking to the database, after retries are exhausted or skipped."""


class CreationFailed(StoreError):
    """An insert did not yield a new id, or the new row could not be read back."""


# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500

MSG_NOT_AUTHENTICATED = "Not authenticated"
MSG_INVALID_TOKEN = "Invalid or missing API token"
MSG_INTERNAL_ERROR = "Internal server error"
MSG_NOTIFICATION_ID_REQUIRED = "Notification id is required"
MSG_NOTIFICATION_ID_INVALID = "Invalid notification id"
MSG_REQUEST_NOT_FOUND = "Document request not found"

# Headers that keep browsers and proxies from serving stale unread counts
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class ApiError(Exception):
    """Raised from dependencies/handlers; rendered by the app-level handler as {success: false, message}."""

    def __init__(self, status_code: int, message: str, headers: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.headers = headers


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def internal_error() -> ApiError:
    """Generic 500: the underlying exception is logged by the caller, never returned to the client."""
    return ApiError(STATUS_INTERNAL_ERROR, MSG_INTERNAL_ERROR)
