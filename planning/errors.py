"""Exceptions raised by the planning services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planning.domain.models import ConflictResult


class PlanningError(Exception):
    """Base class for every error raised by the planning services."""


class MalformedRangeError(PlanningError, ValueError):
    """A date range whose end is not strictly after its start."""


class InvalidRecurrenceError(PlanningError, ValueError):
    """Recurrence parameters that cannot produce a valid series."""


class VacationNotFoundError(PlanningError, LookupError):
    def __init__(self, vacation_id: str) -> None:
        super().__init__(f"Vacation {vacation_id} not found")
        self.vacation_id = vacation_id


class ScheduleConflictError(PlanningError):
    """Raised when the conflict policy blocks a submission."""

    def __init__(self, conflicts: list[ConflictResult], message: str) -> None:
        super().__init__(message)
        self.conflicts = conflicts
        self.message = message
