"""Vacation workflow: conflict checks, recurring series and slot records."""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from planning.domain.bus import EventBus
from planning.domain.events import (
    ConflictDetected,
    PlanningFailed,
    SeriesCreated,
    SeriesDeleted,
    VacationCreated,
    VacationDeleted,
    VacationUpdated,
)
from planning.domain.models import (
    ConflictPolicy,
    ConflictResult,
    DateRange,
    ScheduleEntry,
    SeriesRequest,
    SeriesResponse,
    TimeSlot,
    Vacation,
    VacationPayload,
    VacationResponse,
    VacationUpdate,
)
from planning.errors import MalformedRangeError, ScheduleConflictError, VacationNotFoundError
from planning.repos.memory import TimeSlotRepository, VacationRepository
from planning.services.conflicts import find_conflicts, format_conflict_message, validate
from planning.services.recurrence import expand
from planning.services.slots import build_time_slot

logger = logging.getLogger(__name__)


class PlanningService:
    """Creates, edits and deletes an owner's vacations.

    *conflict_policy* decides what happens when a submission overlaps other
    vacations of the same owner: ``BLOCK`` refuses it with
    :class:`ScheduleConflictError`, ``WARN`` stores it and publishes
    :class:`ConflictDetected`.
    """

    def __init__(
        self,
        vacation_repo: VacationRepository,
        slot_repo: TimeSlotRepository,
        bus: EventBus,
        conflict_policy: ConflictPolicy = ConflictPolicy.BLOCK,
        slot_tolerance_minutes: int = 0,
        horizon: timedelta | None = None,
        max_occurrences: int | None = None,
    ) -> None:
        self.vacation_repo = vacation_repo
        self.slot_repo = slot_repo
        self.bus = bus
        self.conflict_policy = conflict_policy
        self.slot_tolerance_minutes = slot_tolerance_minutes
        self.horizon = horizon
        self.max_occurrences = max_occurrences

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_vacations(self, owner_id: str) -> list[Vacation]:
        return self.vacation_repo.list_for_owner(owner_id)

    def get_vacation(self, vacation_id: str) -> Vacation:
        vacation = self.vacation_repo.get(vacation_id)
        if vacation is None:
            raise VacationNotFoundError(vacation_id)
        return vacation

    # ------------------------------------------------------------------
    # Single vacations
    # ------------------------------------------------------------------

    def create_vacation(self, owner_id: str, payload: VacationPayload) -> VacationResponse:
        result = validate(payload.range, self._entries(owner_id))
        if not result.is_valid and not result.conflicts:
            raise MalformedRangeError("end must be after start")
        warning = self._apply_policy(result.conflicts)

        vacation = Vacation(owner_id=owner_id, **payload.model_dump())
        slot = self._build_slot(vacation)
        self.vacation_repo.add(vacation)
        self._store_slots(owner_id, "create the vacation", [vacation], [slot])
        logger.info("Created vacation %s for owner %s", vacation.id, owner_id)

        self.bus.publish(VacationCreated(owner_id=owner_id, vacation_id=vacation.id))
        self._publish_conflicts(owner_id, [vacation.id], result.conflicts, warning)
        return VacationResponse(
            vacation=vacation, time_slots=[slot], conflicts=result.conflicts, warning=warning
        )

    def update_vacation(self, vacation_id: str, changes: VacationUpdate) -> VacationResponse:
        current = self.get_vacation(vacation_id)
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        dates_changed = "start" in updates or "end" in updates

        conflicts: list[ConflictResult] = []
        warning = ""
        if dates_changed:
            candidate = DateRange(
                start=updates.get("start", current.start),
                end=updates.get("end", current.end),
            )
            result = validate(
                candidate, self._entries(current.owner_id), exclude_id=vacation_id
            )
            if not result.is_valid and not result.conflicts:
                raise MalformedRangeError("end must be after start")
            conflicts = result.conflicts
            warning = self._apply_policy(conflicts)

        updated = Vacation.model_validate({**current.model_dump(), **updates})
        self.vacation_repo.replace(updated)
        if dates_changed:
            self.slot_repo.delete_for_vacations([vacation_id])
            self.slot_repo.add_many([self._build_slot(updated)])
        logger.info("Updated vacation %s (%s)", vacation_id, ", ".join(sorted(updates)))

        self.bus.publish(VacationUpdated(owner_id=updated.owner_id, vacation_id=vacation_id))
        self._publish_conflicts(updated.owner_id, [vacation_id], conflicts, warning)
        return VacationResponse(
            vacation=updated,
            time_slots=self.slot_repo.list_for_vacation(vacation_id),
            conflicts=conflicts,
            warning=warning,
        )

    def delete_vacation(self, vacation_id: str) -> None:
        vacation = self.get_vacation(vacation_id)
        # Slots reference the vacation, remove them first
        self.slot_repo.delete_for_vacations([vacation_id])
        self.vacation_repo.delete(vacation_id)
        logger.info("Deleted vacation %s", vacation_id)
        self.bus.publish(VacationDeleted(owner_id=vacation.owner_id, vacation_id=vacation_id))

    # ------------------------------------------------------------------
    # Recurring series
    # ------------------------------------------------------------------

    def create_series(self, owner_id: str, request: SeriesRequest) -> SeriesResponse:
        """Expand the request's rule and store one vacation per occurrence.

        Every occurrence is checked against the owner's existing vacations
        and the earlier occurrences of the same series before anything is
        stored, so a blocked series leaves no trace. A vacation hit by several
        occurrences is reported once.
        """
        payload = request.vacation
        occurrences = expand(
            payload.range,
            request.rule,
            horizon=self.horizon,
            max_occurrences=self.max_occurrences,
        )

        group_id = str(uuid.uuid4())
        fields = payload.model_dump(exclude={"start", "end"})
        vacations = [
            Vacation(
                owner_id=owner_id,
                start=occurrence.range.start,
                end=occurrence.range.end,
                recurrence_group_id=group_id,
                **fields,
            )
            for occurrence in occurrences
        ]

        # Each occurrence must also clear the earlier occurrences of the series
        entries = self._entries(owner_id)
        conflicts: list[ConflictResult] = []
        seen: set[str] = set()
        for vacation in vacations:
            for conflict in find_conflicts(vacation.range, entries):
                if conflict.conflicting_entry_id not in seen:
                    seen.add(conflict.conflicting_entry_id)
                    conflicts.append(conflict)
            entries.append(vacation.as_entry())
        warning = self._apply_policy(conflicts)

        slots = [self._build_slot(vacation) for vacation in vacations]

        self.vacation_repo.add_many(vacations)
        self._store_slots(owner_id, "create the recurring vacation", vacations, slots)
        logger.info(
            "Created series %s for owner %s: %d %s occurrence(s)",
            group_id,
            owner_id,
            len(vacations),
            request.rule.frequency,
        )

        vacation_ids = [v.id for v in vacations]
        self.bus.publish(
            SeriesCreated(
                owner_id=owner_id, recurrence_group_id=group_id, vacation_ids=vacation_ids
            )
        )
        self._publish_conflicts(owner_id, vacation_ids, conflicts, warning)
        return SeriesResponse(
            recurrence_group_id=group_id,
            vacations=vacations,
            time_slots=slots,
            conflicts=conflicts,
            warning=warning,
        )

    def delete_series(self, owner_id: str, group_id: str) -> int:
        """Delete every vacation of a series owned by *owner_id*; return the count."""
        vacation_ids = [v.id for v in self.vacation_repo.list_group(owner_id, group_id)]
        if not vacation_ids:
            return 0
        self.slot_repo.delete_for_vacations(vacation_ids)
        self.vacation_repo.delete_many(vacation_ids)
        logger.info("Deleted series %s (%d vacations)", group_id, len(vacation_ids))
        self.bus.publish(
            SeriesDeleted(
                owner_id=owner_id,
                recurrence_group_id=group_id,
                deleted_count=len(vacation_ids),
            )
        )
        return len(vacation_ids)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entries(self, owner_id: str) -> list[ScheduleEntry]:
        return [v.as_entry() for v in self.vacation_repo.list_for_owner(owner_id)]

    def _build_slot(self, vacation: Vacation) -> TimeSlot:
        return build_time_slot(vacation.id, vacation.range, self.slot_tolerance_minutes)

    def _apply_policy(self, conflicts: list[ConflictResult]) -> str:
        """Return the warning to attach, or raise when the policy blocks."""
        if not conflicts:
            return ""
        message = format_conflict_message(conflicts)
        if self.conflict_policy == ConflictPolicy.BLOCK:
            logger.info("Rejected submission with %d conflict(s)", len(conflicts))
            raise ScheduleConflictError(conflicts, message)
        logger.warning("Accepting submission with %d conflict(s)", len(conflicts))
        return message

    def _publish_conflicts(
        self,
        owner_id: str,
        vacation_ids: list[str],
        conflicts: list[ConflictResult],
        message: str,
    ) -> None:
        if conflicts:
            self.bus.publish(
                ConflictDetected(
                    owner_id=owner_id,
                    vacation_ids=vacation_ids,
                    conflicts=conflicts,
                    message=message,
                )
            )

    def _store_slots(
        self,
        owner_id: str,
        action: str,
        vacations: list[Vacation],
        slots: list[TimeSlot],
    ) -> None:
        """Store *slots*; on failure remove the already stored *vacations*."""
        try:
            self.slot_repo.add_many(slots)
        except Exception as exc:
            logger.exception(
                "Storing time slots failed, rolling back %d vacation(s)", len(vacations)
            )
            self.vacation_repo.delete_many([v.id for v in vacations])
            self.bus.publish(PlanningFailed(owner_id=owner_id, action=action, error=str(exc)))
            raise
