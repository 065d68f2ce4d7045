"""Errors raised by the HTTP layer."""
from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """Base class for every failure talking to the backend."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ApiConnectionError(ApiError):
    """Network failure or timeout; no response was received."""


class ApiResponseError(ApiError):
    """The server answered with a non-2xx status or `success: false`."""


class UnauthorizedError(ApiResponseError):
    """401 outside the exempt paths. The session has already been cleared."""

    def __init__(self, message: str = "Session expired. Please log in again.") -> None:
        super().__init__(message, status=401)
