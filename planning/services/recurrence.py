"""Service for expanding a base vacation window and a recurrence rule into
the concrete occurrences to store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from planning import config
from planning.domain.models import (
    AfterCount,
    DateRange,
    Frequency,
    Never,
    Occurrence,
    OnDate,
    RecurrenceRule,
)
from planning.errors import InvalidRecurrenceError

logger = logging.getLogger(__name__)

_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
}


def expand(
    base: DateRange,
    rule: RecurrenceRule,
    horizon: timedelta | None = None,
    max_occurrences: int | None = None,
) -> list[Occurrence]:
    """Expand *base* into the ordered occurrences described by *rule*.

    The first occurrence is always *base*. Each following start is the
    previous start advanced by one period (monthly steps clamp to the end of
    shorter months, and the clamped day carries forward); every occurrence
    keeps the duration of *base*.

    A rule that never ends stops at ``base.start + horizon`` (exclusive),
    which defaults to ``RECURRENCE_HORIZON_DAYS``.
    """
    base.require_well_formed()
    if rule.frequency == Frequency.NONE:
        return [Occurrence(index=0, range=base)]

    _check_end_condition(base, rule)

    if horizon is None:
        horizon = timedelta(days=config.RECURRENCE_HORIZON_DAYS)
    if max_occurrences is None:
        max_occurrences = config.MAX_OCCURRENCES

    step = _STEPS[rule.frequency]
    duration = base.duration
    end_condition = rule.end_condition

    occurrences: list[Occurrence] = []
    current = base.start
    try:
        cutoff = base.start + horizon if isinstance(end_condition, Never) else None
        while _should_emit(current, len(occurrences), end_condition, cutoff):
            if len(occurrences) >= max_occurrences:
                raise InvalidRecurrenceError(
                    f"Recurrence produces more than {max_occurrences} occurrences"
                )
            occurrences.append(
                Occurrence(
                    index=len(occurrences),
                    range=DateRange(start=current, end=current + duration),
                )
            )
            current = current + step
    except InvalidRecurrenceError:
        raise
    except (OverflowError, ValueError) as exc:
        # datetime arithmetic past year 9999
        raise InvalidRecurrenceError(
            f"Recurrence runs past the last representable date: {exc}"
        ) from exc

    logger.debug(
        "Expanded %s rule (%s) into %d occurrences",
        rule.frequency,
        end_condition.kind,
        len(occurrences),
    )
    return occurrences


def _should_emit(
    start: datetime,
    emitted: int,
    end_condition: Never | AfterCount | OnDate,
    cutoff: datetime | None,
) -> bool:
    if isinstance(end_condition, AfterCount):
        return emitted < end_condition.count
    if isinstance(end_condition, OnDate):
        return start.date() <= end_condition.until
    return start < cutoff


def _check_end_condition(base: DateRange, rule: RecurrenceRule) -> None:
    end_condition = rule.end_condition
    if isinstance(end_condition, AfterCount) and end_condition.count < 1:
        raise InvalidRecurrenceError(
            f"Occurrence count must be at least 1, got {end_condition.count}"
        )
    if isinstance(end_condition, OnDate) and end_condition.until < base.start.date():
        raise InvalidRecurrenceError(
            f"Recurrence end date {end_condition.until.isoformat()} is before "
            f"the first occurrence ({base.start.date().isoformat()})"
        )
