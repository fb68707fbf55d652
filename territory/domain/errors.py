"""Recoverable errors raised when a write is refused."""

from __future__ import annotations


class TerritoryError(Exception):
    """Base class; ``code`` is echoed to API callers."""

    code = "TERRITORY_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationFailure(TerritoryError):
    code = "VALIDATION_ERROR"


class NotFound(TerritoryError):
    code = "NOT_FOUND"


class TerritoryViolation(TerritoryError):
    """A postal code is already claimed by another active client."""

    code = "TERRITORY_VIOLATION"

    def __init__(self, postal_code: str, owner_name: str | None = None) -> None:
        message = f"This postal code ({postal_code}) is assigned to another client."
        details = [f"{postal_code} is claimed by {owner_name}"] if owner_name else []
        super().__init__(message, details)
        self.postal_code = postal_code
        self.owner_name = owner_name


class SchedulingConflict(TerritoryError):
    """The candidate event conflicts with stored events; the caller may override."""

    code = "SCHEDULING_CONFLICT"

    def __init__(self, conflict_ids: list[str], descriptions: list[str]) -> None:
        message = (
            f"This event conflicts with {len(conflict_ids)} existing event(s): "
            f"{', '.join(descriptions)}"
        )
        super().__init__(message, descriptions)
        self.conflict_ids = conflict_ids
