# Path: core/errors.py
# Purpose: Define the exception hierarchy raised by the backend client and lifecycle components.
# Layer: core.
# Details: Every failure is recoverable by user action; the store converts these into ErrorState values.

from __future__ import annotations

from typing import Optional


class ImaceError(Exception):
    """Base class for all client-side failures."""


class BackendConnectionError(ImaceError):
    """The backend could not be reached (refused, reset, DNS, or transport timeout)."""


class BackendResponseError(ImaceError):
    """The backend answered with a non-success status or a payload the client cannot read."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UploadFailure(ImaceError):
    """The upload batch was not accepted; the whole batch is treated as failed."""


class DeleteFailure(ImaceError):
    """The delete-all request did not complete."""


__all__ = [
    "BackendConnectionError",
    "BackendResponseError",
    "DeleteFailure",
    "ImaceError",
    "UploadFailure",
]
