"""Service for detecting date conflicts between a candidate range and an
owner's existing schedule entries."""

from __future__ import annotations

from planning.domain.models import (
    ConflictResult,
    DateRange,
    OverlapType,
    ScheduleEntry,
    ValidationResult,
)


def classify_overlap(candidate: DateRange, existing: DateRange) -> OverlapType | None:
    """Return how *candidate* overlaps *existing*, or ``None`` if it does not.

    Complete overlap is directional: only a candidate that contains the
    existing range counts. An existing range that contains the candidate is
    caught by the boundary test and reported as partial. Boundaries are
    inclusive, so ranges that merely touch are a partial overlap.
    """
    if candidate.start <= existing.start and candidate.end >= existing.end:
        return OverlapType.COMPLETE
    if (
        existing.contains(candidate.start)
        or existing.contains(candidate.end)
        or candidate.contains(existing.start)
        or candidate.contains(existing.end)
    ):
        return OverlapType.PARTIAL
    return None


def find_conflicts(
    candidate: DateRange,
    existing: list[ScheduleEntry],
    exclude_id: str | None = None,
) -> list[ConflictResult]:
    """Return one ConflictResult per existing entry that overlaps *candidate*,
    in input order.

    The entry whose id equals *exclude_id* is skipped, which lets an edited
    entry be checked against its siblings only.
    """
    conflicts: list[ConflictResult] = []
    for entry in existing:
        if exclude_id is not None and entry.id == exclude_id:
            continue
        overlap = classify_overlap(candidate, entry.range)
        if overlap is None:
            continue
        conflicts.append(
            ConflictResult(
                conflicting_entry_id=entry.id,
                title=entry.title,
                start=entry.range.start,
                end=entry.range.end,
                overlap_type=overlap,
            )
        )
    return conflicts


def validate(
    candidate: DateRange,
    existing: list[ScheduleEntry],
    exclude_id: str | None = None,
) -> ValidationResult:
    """Check that *candidate* is well formed and free of conflicts.

    A malformed candidate is invalid and no conflicts are computed for it.
    """
    if not candidate.is_well_formed:
        return ValidationResult(is_valid=False, conflicts=[])
    conflicts = find_conflicts(candidate, existing, exclude_id=exclude_id)
    return ValidationResult(is_valid=not conflicts, conflicts=conflicts)


def format_conflict_message(conflicts: list[ConflictResult]) -> str:
    if not conflicts:
        return ""
    lines = [f"This vacation overlaps {len(conflicts)} other vacation(s):"]
    for conflict in conflicts:
        lines.append(f'- "{conflict.title}" ({conflict.overlap_type} overlap)')
    return "\n".join(lines)
