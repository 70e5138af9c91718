"""Open/closed lifecycle shared by every adapter."""

from __future__ import annotations

from enum import Enum

from policy_adapter.exceptions import AdapterStateError, NotOpenError


class AdapterState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class Lifecycle:
    """Tracks ``unopened -> open -> closed``.  Closed is terminal."""

    def __init__(self) -> None:
        self._state = AdapterState.UNOPENED

    @property
    def state(self) -> AdapterState:
        return self._state

    def require_unopened(self) -> None:
        if self._state is not AdapterState.UNOPENED:
            raise AdapterStateError(f"open() called on an adapter that is {self._state.value}")

    def mark_open(self) -> None:
        self.require_unopened()
        self._state = AdapterState.OPEN

    def mark_closed(self) -> None:
        self._state = AdapterState.CLOSED

    def require_open(self, operation: str) -> None:
        if self._state is not AdapterState.OPEN:
            raise NotOpenError(operation, self._state.value)
