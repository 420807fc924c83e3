"""Sweep error taxonomy."""

from __future__ import annotations


class SweepError(Exception):
    """Base class for failures surfaced by a sweep."""


class StoreError(SweepError):
    """The signal store rejected or could not complete a query."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        detail = str(cause).strip().splitlines()[0] if str(cause).strip() else type(cause).__name__
        super().__init__(f"{operation} failed: {detail}")


class UnexpectedError(SweepError):
    """Anything else raised while running a sweep or building its response."""
