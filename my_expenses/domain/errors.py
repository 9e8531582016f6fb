"""Error taxonomy shared by the entities, repositories and transport layer."""

from __future__ import annotations


class ExpenseTrackerError(RuntimeError):
    """Base class for every error raised on purpose by the service."""


class ValidationError(ExpenseTrackerError):
    """Raised when an input violates an entity or report invariant."""


class NotFoundError(ExpenseTrackerError):
    """Raised when an entity cannot be located in the store."""


class ConflictError(ExpenseTrackerError):
    """Raised when a unique constraint is violated."""


class ReferentialIntegrityError(ExpenseTrackerError):
    """Raised when a delete is blocked by rows still referencing the entity."""

    def __init__(self, message: str, *, count: int) -> None:
        super().__init__(message)
        self.count = count


__all__ = [
    "ConflictError",
    "ExpenseTrackerError",
    "NotFoundError",
    "ReferentialIntegrityError",
    "ValidationError",
]
