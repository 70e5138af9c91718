"""Custom exceptions for the policy_adapter package."""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for all adapter errors."""


class ArityError(AdapterError, ValueError):
    """Raised when a rule or filter does not fit in the six value slots."""

    def __init__(self, ptype: str, size: int, limit: int = 6) -> None:
        self.ptype = ptype
        self.size = size
        super().__init__(
            f"Rule of type '{ptype}' needs {size} slots, at most {limit} are available"
        )


class AdapterStateError(AdapterError):
    """Raised on an illegal lifecycle transition."""


class NotOpenError(AdapterStateError):
    """Raised when an operation runs on an adapter that is not open."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot run '{operation}': adapter is {state}")


class StoreError(AdapterError):
    """Raised when a store operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreUnavailableError(StoreError):
    """The backing store could not be reached or read."""


class SaveFailedError(StoreError):
    """A write, commit or constraint check failed.  Nothing was persisted."""


class FilterNotSupportedError(StoreError):
    """The backend has no way to run a filtered removal."""
