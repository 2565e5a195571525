"""Domain models for vacation planning."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from planning.domain.dates import parse_end_date
from planning.errors import MalformedRangeError


class OverlapType(StrEnum):
    COMPLETE = "complete"
    PARTIAL = "partial"


class Frequency(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SlotType(StrEnum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    CUSTOM = "custom"


class ActType(StrEnum):
    CONSULTATION = "consultation"
    URGENCE = "urgence"
    VISITE = "visite"
    TELECONSULTATION = "teleconsultation"


class VacationStatus(StrEnum):
    AVAILABLE = "available"
    BOOKED = "booked"


class NotificationLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ConflictPolicy(StrEnum):
    BLOCK = "block"
    WARN = "warn"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _assume_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC so every stored value compares."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(_assume_utc)]


# ---------------------------------------------------------------------------
# Ranges and conflicts
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    """A start/end pair.

    Malformed ranges (``end <= start``) can be constructed so that they can be
    reported; call :meth:`require_well_formed` where they must be refused.
    """

    model_config = ConfigDict(frozen=True)

    start: UTCDateTime
    end: UTCDateTime

    @property
    def is_well_formed(self) -> bool:
        return self.end > self.start

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, point: datetime) -> bool:
        """Inclusive on both ends."""
        return self.start <= point <= self.end

    def require_well_formed(self) -> DateRange:
        if not self.is_well_formed:
            raise MalformedRangeError(
                f"end ({self.end.isoformat()}) must be after start ({self.start.isoformat()})"
            )
        return self


class ScheduleEntry(BaseModel):
    id: str
    owner_id: str
    range: DateRange
    title: str = ""


class ConflictResult(BaseModel):
    conflicting_entry_id: str
    title: str
    start: datetime
    end: datetime
    overlap_type: OverlapType


class ValidationResult(BaseModel):
    is_valid: bool
    conflicts: list[ConflictResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------


class Never(BaseModel):
    kind: Literal["never"] = "never"


class AfterCount(BaseModel):
    kind: Literal["count"] = "count"
    count: int


class OnDate(BaseModel):
    kind: Literal["date"] = "date"
    until: date

    @field_validator("until", mode="before")
    @classmethod
    def _parse_until(cls, value):
        if isinstance(value, str):
            return parse_end_date(value)
        return value


EndCondition = Annotated[Union[Never, AfterCount, OnDate], Field(discriminator="kind")]


class RecurrenceRule(BaseModel):
    frequency: Frequency = Frequency.NONE
    end_condition: EndCondition = Field(default_factory=Never)


class Occurrence(BaseModel):
    index: int
    range: DateRange


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Vacation(BaseModel):
    id: str = Field(default_factory=_new_id)
    owner_id: str
    title: str
    start: UTCDateTime
    end: UTCDateTime
    description: str = ""
    speciality: str = "general_medicine"
    location: str = ""
    act_type: ActType = ActType.CONSULTATION
    hourly_rate: float = Field(default=0, ge=0)
    requirements: str = ""
    status: VacationStatus = VacationStatus.AVAILABLE
    recurrence_group_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Vacation:
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    @property
    def range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)

    def as_entry(self) -> ScheduleEntry:
        return ScheduleEntry(
            id=self.id, owner_id=self.owner_id, range=self.range, title=self.title
        )


class TimeSlot(BaseModel):
    id: str = Field(default_factory=_new_id)
    vacation_id: str
    type: SlotType
    start_time: time | None = None
    end_time: time | None = None


class Notification(BaseModel):
    id: str = Field(default_factory=_new_id)
    owner_id: str
    level: NotificationLevel = NotificationLevel.INFO
    title: str
    message: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class VacationPayload(BaseModel):
    """Form fields shared by single vacations and recurring series."""

    title: str = "Disponibilité"
    start: UTCDateTime
    end: UTCDateTime
    description: str = ""
    speciality: str = "general_medicine"
    location: str = ""
    act_type: ActType = ActType.CONSULTATION
    hourly_rate: float = Field(default=0, ge=0)
    requirements: str = ""

    @property
    def range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)


class VacationUpdate(BaseModel):
    title: str | None = None
    start: UTCDateTime | None = None
    end: UTCDateTime | None = None
    description: str | None = None
    speciality: str | None = None
    location: str | None = None
    act_type: ActType | None = None
    hourly_rate: float | None = Field(default=None, ge=0)
    requirements: str | None = None
    status: VacationStatus | None = None


class VacationResponse(BaseModel):
    vacation: Vacation
    time_slots: list[TimeSlot] = Field(default_factory=list)
    conflicts: list[ConflictResult] = Field(default_factory=list)
    warning: str = ""


class ValidateRequest(BaseModel):
    candidate: DateRange
    existing: list[ScheduleEntry] = Field(default_factory=list)
    exclude_id: str | None = None


class ValidateResponse(ValidationResult):
    message: str = ""


class PreviewRequest(BaseModel):
    base: DateRange
    rule: RecurrenceRule = Field(default_factory=RecurrenceRule)


class PreviewItem(BaseModel):
    index: int
    start: datetime
    end: datetime
    slot_type: SlotType


class SeriesRequest(BaseModel):
    vacation: VacationPayload
    rule: RecurrenceRule


class SeriesResponse(BaseModel):
    recurrence_group_id: str
    vacations: list[Vacation]
    time_slots: list[TimeSlot] = Field(default_factory=list)
    conflicts: list[ConflictResult] = Field(default_factory=list)
    warning: str = ""
