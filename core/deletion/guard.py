# Path: core/deletion/guard.py
# Purpose: Two-step confirmation state machine for the destructive delete-all operation.
# Layer: core/deletion.
# Details: idle -> confirming -> deleting -> idle; repeat confirmations are rejected while deleting.

from __future__ import annotations

import logging
from typing import Optional

from core.models.domain import DeleteState

logger = logging.getLogger(__name__)


class DeletionGuard:
    """Gate the delete-all request behind an explicit confirmation step."""

    def __init__(self) -> None:
        self._state = DeleteState.IDLE
        self._last_error: Optional[str] = None

    @property
    def state(self) -> DeleteState:
        return self._state

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_deleting(self) -> bool:
        return self._state is DeleteState.DELETING

    def request_delete(self) -> bool:
        if self._state is not DeleteState.IDLE:
            return False
        self._state = DeleteState.CONFIRMING
        self._last_error = None
        return True

    def cancel_delete_confirm(self) -> bool:
        if self._state is not DeleteState.CONFIRMING:
            return False
        self._state = DeleteState.IDLE
        return True

    def confirm_delete(self) -> bool:
        """Enter ``deleting``; True means the caller must now issue the request."""

        if self._state is not DeleteState.CONFIRMING:
            return False
        self._state = DeleteState.DELETING
        logger.warning("Delete-all confirmed")
        return True

    def finish_delete(self, error: Optional[BaseException] = None) -> bool:
        """Return to ``idle``; the result tells whether the delete succeeded."""

        if self._state is not DeleteState.DELETING:
            return False
        self._state = DeleteState.IDLE
        if error is None:
            self._last_error = None
            return True
        self._last_error = str(error) or error.__class__.__name__
        logger.error("Delete-all failed: %s", self._last_error)
        return False
