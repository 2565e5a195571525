"""Domain event handlers that turn planning outcomes into owner notifications."""

from __future__ import annotations

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
from planning.domain.models import Notification, NotificationLevel
from planning.repos.memory import NotificationRepository


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class HandlerRegistry:
    """Wires domain-event handlers to the bus."""

    def __init__(self, bus: EventBus, notification_repo: NotificationRepository) -> None:
        self.bus = bus
        self.notification_repo = notification_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(VacationCreated, self.on_vacation_created)
        self.bus.subscribe(VacationUpdated, self.on_vacation_updated)
        self.bus.subscribe(VacationDeleted, self.on_vacation_deleted)
        self.bus.subscribe(SeriesCreated, self.on_series_created)
        self.bus.subscribe(SeriesDeleted, self.on_series_deleted)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)
        self.bus.subscribe(PlanningFailed, self.on_planning_failed)

    def _notify(
        self,
        owner_id: str,
        title: str,
        message: str = "",
        level: NotificationLevel = NotificationLevel.INFO,
    ) -> None:
        self.notification_repo.add(
            Notification(owner_id=owner_id, level=level, title=title, message=message)
        )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_vacation_created(self, event: VacationCreated) -> None:
        self._notify(event.owner_id, "Vacation created", "1 slot created")

    def on_vacation_updated(self, event: VacationUpdated) -> None:
        self._notify(event.owner_id, "Vacation updated")

    def on_vacation_deleted(self, event: VacationDeleted) -> None:
        self._notify(event.owner_id, "Vacation deleted", "The slot was deleted")

    def on_series_created(self, event: SeriesCreated) -> None:
        count = len(event.vacation_ids)
        self._notify(
            event.owner_id, "Recurring vacation created", f"{_plural(count, 'slot')} created"
        )

    def on_series_deleted(self, event: SeriesDeleted) -> None:
        self._notify(
            event.owner_id,
            "Recurring vacation deleted",
            f"{_plural(event.deleted_count, 'occurrence')} deleted",
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        self._notify(
            event.owner_id,
            "Overlapping vacations",
            event.message,
            level=NotificationLevel.WARNING,
        )

    def on_planning_failed(self, event: PlanningFailed) -> None:
        self._notify(
            event.owner_id,
            f"Could not {event.action}",
            event.error,
            level=NotificationLevel.ERROR,
        )
