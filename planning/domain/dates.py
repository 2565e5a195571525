"""Parsing of user-typed calendar dates at the form boundary."""

from __future__ import annotations

from datetime import date, datetime

import dateparser

from planning.errors import InvalidRecurrenceError

_LANGUAGES = ["fr", "en"]


def parse_end_date(raw: str | date | datetime) -> date:
    """Parse a recurrence end date typed by a user.

    ISO dates are taken as-is; anything else (``"5 janvier 2026"``,
    ``"March 3"``) goes through dateparser with day-first ordering.
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = raw.strip()
    if not text:
        raise InvalidRecurrenceError("Recurrence end date is empty")
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    settings = {
        "DATE_ORDER": "DMY",
        "PREFER_DATES_FROM": "future",
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    result = dateparser.parse(text, languages=_LANGUAGES, settings=settings)
    if result is None:
        raise InvalidRecurrenceError(f"Could not understand end date {raw!r}")
    return result.date()
