"""Service for turning an occurrence's time of day into a stored time slot."""

from __future__ import annotations

from datetime import datetime

from planning.domain.models import DateRange, SlotType, TimeSlot

# (start, end) in minutes past midnight
_WINDOWS = {
    SlotType.MORNING: (8 * 60, 12 * 60),
    SlotType.AFTERNOON: (14 * 60, 18 * 60),
}


def _minutes(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def classify_slot(window: DateRange, tolerance_minutes: int = 0) -> SlotType:
    """Return the canonical slot type for *window*'s time of day.

    Morning is 08:00–12:00 and afternoon 14:00–18:00; each boundary may be off
    by at most *tolerance_minutes*. Anything else is custom.
    """
    start, end = _minutes(window.start), _minutes(window.end)
    for slot_type, (slot_start, slot_end) in _WINDOWS.items():
        if (
            abs(start - slot_start) <= tolerance_minutes
            and abs(end - slot_end) <= tolerance_minutes
        ):
            return slot_type
    return SlotType.CUSTOM


def build_time_slot(
    vacation_id: str, window: DateRange, tolerance_minutes: int = 0
) -> TimeSlot:
    """Build the slot record for one vacation; only custom slots keep times."""
    slot_type = classify_slot(window, tolerance_minutes)
    if slot_type != SlotType.CUSTOM:
        return TimeSlot(vacation_id=vacation_id, type=slot_type)
    return TimeSlot(
        vacation_id=vacation_id,
        type=slot_type,
        start_time=window.start.time().replace(microsecond=0),
        end_time=window.end.time().replace(microsecond=0),
    )
