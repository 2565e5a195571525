"""In-memory repositories for vacations, time slots and notifications."""

from __future__ import annotations

from planning.domain.models import Notification, TimeSlot, Vacation


class VacationRepository:
    """Dict-backed store for Vacation instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Vacation] = {}

    def add(self, vacation: Vacation) -> None:
        self._store[vacation.id] = vacation

    def add_many(self, vacations: list[Vacation]) -> None:
        for vacation in vacations:
            self._store[vacation.id] = vacation

    def get(self, vacation_id: str) -> Vacation | None:
        return self._store.get(vacation_id)

    def replace(self, vacation: Vacation) -> None:
        self._store[vacation.id] = vacation

    def list_for_owner(self, owner_id: str) -> list[Vacation]:
        """Return an owner's vacations ordered by start."""
        return sorted(
            (v for v in self._store.values() if v.owner_id == owner_id),
            key=lambda v: v.start,
        )

    def list_group(self, owner_id: str, group_id: str) -> list[Vacation]:
        """Return the vacations of one recurring series."""
        return [
            v
            for v in self.list_for_owner(owner_id)
            if v.recurrence_group_id == group_id
        ]

    def delete(self, vacation_id: str) -> None:
        self._store.pop(vacation_id, None)

    def delete_many(self, vacation_ids: list[str]) -> None:
        for vacation_id in vacation_ids:
            self._store.pop(vacation_id, None)


class TimeSlotRepository:
    """List-backed store for TimeSlot instances."""

    def __init__(self) -> None:
        self._slots: list[TimeSlot] = []

    def add_many(self, slots: list[TimeSlot]) -> None:
        self._slots.extend(slots)

    def list_for_vacation(self, vacation_id: str) -> list[TimeSlot]:
        return [s for s in self._slots if s.vacation_id == vacation_id]

    def delete_for_vacations(self, vacation_ids: list[str]) -> None:
        ids = set(vacation_ids)
        self._slots = [s for s in self._slots if s.vacation_id not in ids]


class NotificationRepository:
    """List-backed store for Notification instances."""

    def __init__(self) -> None:
        self._notifications: list[Notification] = []

    def add(self, notification: Notification) -> None:
        self._notifications.append(notification)

    def list_for_owner(self, owner_id: str) -> list[Notification]:
        return sorted(
            [n for n in self._notifications if n.owner_id == owner_id],
            key=lambda n: n.created_at,
        )
