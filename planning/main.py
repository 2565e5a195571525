"""FastAPI application: entry point for the vacation planning service."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from planning import config
from planning.domain.bus import EventBus
from planning.domain.handlers import HandlerRegistry
from planning.domain.models import (
    ConflictPolicy,
    Notification,
    PreviewItem,
    PreviewRequest,
    SeriesRequest,
    SeriesResponse,
    ValidateRequest,
    ValidateResponse,
    Vacation,
    VacationPayload,
    VacationResponse,
    VacationUpdate,
)
from planning.errors import (
    InvalidRecurrenceError,
    MalformedRangeError,
    ScheduleConflictError,
    VacationNotFoundError,
)
from planning.repos.memory import (
    NotificationRepository,
    TimeSlotRepository,
    VacationRepository,
)
from planning.services.conflicts import format_conflict_message, validate
from planning.services.planning import PlanningService
from planning.services.recurrence import expand
from planning.services.slots import classify_slot

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Vacation Planning Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
vacation_repo = VacationRepository()
slot_repo = TimeSlotRepository()
notification_repo = NotificationRepository()

handler_registry = HandlerRegistry(bus=event_bus, notification_repo=notification_repo)

planning_service = PlanningService(
    vacation_repo=vacation_repo,
    slot_repo=slot_repo,
    bus=event_bus,
    conflict_policy=ConflictPolicy(config.CONFLICT_POLICY),
    slot_tolerance_minutes=config.SLOT_TOLERANCE_MINUTES,
    horizon=timedelta(days=config.RECURRENCE_HORIZON_DAYS),
    max_occurrences=config.MAX_OCCURRENCES,
)
logger.info("Conflict policy: %s", planning_service.conflict_policy)


# ── Error mapping ─────────────────────────────────────────────────────


@app.exception_handler(MalformedRangeError)
@app.exception_handler(InvalidRecurrenceError)
async def invalid_input_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ScheduleConflictError)
async def conflict_handler(request: Request, exc: ScheduleConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "detail": exc.message,
            "conflicts": [c.model_dump(mode="json") for c in exc.conflicts],
        },
    )


@app.exception_handler(VacationNotFoundError)
async def not_found_handler(request: Request, exc: VacationNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@app.post("/conflicts/validate", response_model=ValidateResponse)
def validate_range(payload: ValidateRequest) -> ValidateResponse:
    """Check a candidate range against caller-supplied entries; nothing is stored."""
    result = validate(payload.candidate, payload.existing, exclude_id=payload.exclude_id)
    return ValidateResponse(
        is_valid=result.is_valid,
        conflicts=result.conflicts,
        message=format_conflict_message(result.conflicts),
    )


@app.post("/recurrence/preview", response_model=list[PreviewItem])
def preview_recurrence(payload: PreviewRequest) -> list[PreviewItem]:
    """Return the occurrences a series would create, with their slot types."""
    occurrences = expand(
        payload.base,
        payload.rule,
        horizon=planning_service.horizon,
        max_occurrences=planning_service.max_occurrences,
    )
    return [
        PreviewItem(
            index=o.index,
            start=o.range.start,
            end=o.range.end,
            slot_type=classify_slot(o.range, planning_service.slot_tolerance_minutes),
        )
        for o in occurrences
    ]


@app.get("/owners/{owner_id}/vacations", response_model=list[Vacation])
def list_vacations(owner_id: str) -> list[Vacation]:
    return planning_service.list_vacations(owner_id)


@app.post(
    "/owners/{owner_id}/vacations", response_model=VacationResponse, status_code=201
)
def create_vacation(owner_id: str, payload: VacationPayload) -> VacationResponse:
    return planning_service.create_vacation(owner_id, payload)


@app.patch("/vacations/{vacation_id}", response_model=VacationResponse)
def update_vacation(vacation_id: str, changes: VacationUpdate) -> VacationResponse:
    return planning_service.update_vacation(vacation_id, changes)


@app.delete("/vacations/{vacation_id}", status_code=200)
def delete_vacation(vacation_id: str) -> dict:
    planning_service.delete_vacation(vacation_id)
    return {"status": "deleted"}


@app.post("/owners/{owner_id}/series", response_model=SeriesResponse, status_code=201)
def create_series(owner_id: str, payload: SeriesRequest) -> SeriesResponse:
    """Create one vacation per occurrence of a recurring rule."""
    return planning_service.create_series(owner_id, payload)


@app.delete("/owners/{owner_id}/series/{group_id}", status_code=200)
def delete_series(owner_id: str, group_id: str) -> dict:
    """Delete every occurrence of a recurring series."""
    deleted = planning_service.delete_series(owner_id, group_id)
    return {"deleted": deleted}


@app.get("/owners/{owner_id}/notifications", response_model=list[Notification])
def list_notifications(owner_id: str) -> list[Notification]:
    return notification_repo.list_for_owner(owner_id)
