"""Domain events emitted by the planning workflow."""

from __future__ import annotations

from pydantic import BaseModel

from planning.domain.models import ConflictResult


class VacationCreated(BaseModel):
    """Fired when a single vacation is stored."""

    owner_id: str
    vacation_id: str


class VacationUpdated(BaseModel):
    owner_id: str
    vacation_id: str


class VacationDeleted(BaseModel):
    owner_id: str
    vacation_id: str


class SeriesCreated(BaseModel):
    """Fired when every occurrence of a recurring series has been stored."""

    owner_id: str
    recurrence_group_id: str
    vacation_ids: list[str]


class SeriesDeleted(BaseModel):
    owner_id: str
    recurrence_group_id: str
    deleted_count: int


class ConflictDetected(BaseModel):
    """Fired when a submission overlapping other vacations was accepted anyway."""

    owner_id: str
    vacation_ids: list[str]
    conflicts: list[ConflictResult]
    message: str


class PlanningFailed(BaseModel):
    """Fired when storing a submission failed and was rolled back."""

    owner_id: str
    action: str
    error: str
