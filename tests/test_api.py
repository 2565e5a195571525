"""Tests for the HTTP layer."""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from planning.main import app

client = TestClient(app)


@pytest.fixture()
def owner_id() -> str:
    return f"doc-{uuid.uuid4()}"


def _vacation(start: str, end: str, **overrides) -> dict:
    body = {"title": "Consultations", "start": start, "end": end, "location": "Lyon"}
    body.update(overrides)
    return body


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_validate_reports_partial_containment():
    response = client.post(
        "/conflicts/validate",
        json={
            "candidate": {"start": "2024-01-03T00:00:00", "end": "2024-01-05T00:00:00"},
            "existing": [
                {
                    "id": "a",
                    "owner_id": "doc-1",
                    "title": "Garde",
                    "range": {"start": "2024-01-01T00:00:00", "end": "2024-01-10T00:00:00"},
                }
            ],
        },
    )
    body = response.json()
    assert response.status_code == 200
    assert body["is_valid"] is False
    assert body["conflicts"][0]["overlap_type"] == "partial"
    assert '"Garde" (partial overlap)' in body["message"]


def test_validate_malformed_candidate():
    response = client.post(
        "/conflicts/validate",
        json={"candidate": {"start": "2024-01-05T00:00:00", "end": "2024-01-01T00:00:00"}},
    )
    assert response.json() == {"is_valid": False, "conflicts": [], "message": ""}


def test_preview_recurrence():
    response = client.post(
        "/recurrence/preview",
        json={
            "base": {"start": "2024-01-01T08:00:00", "end": "2024-01-01T12:00:00"},
            "rule": {"frequency": "daily", "end_condition": {"kind": "date", "until": "2024-01-05"}},
        },
    )
    items = response.json()
    assert response.status_code == 200
    assert [item["start"][:10] for item in items] == [
        "2024-01-01",
        "2024-01-02",
        "2024-01-03",
        "2024-01-04",
        "2024-01-05",
    ]
    assert {item["slot_type"] for item in items} == {"morning"}


def test_preview_rejects_zero_count():
    response = client.post(
        "/recurrence/preview",
        json={
            "base": {"start": "2024-01-01T08:00:00", "end": "2024-01-01T12:00:00"},
            "rule": {"frequency": "weekly", "end_condition": {"kind": "count", "count": 0}},
        },
    )
    assert response.status_code == 422


def test_create_and_list_vacations(owner_id):
    response = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T14:00:00", "2026-05-04T18:00:00"),
    )
    assert response.status_code == 201
    assert response.json()["time_slots"][0]["type"] == "afternoon"

    listed = client.get(f"/owners/{owner_id}/vacations").json()
    assert len(listed) == 1
    assert listed[0]["title"] == "Consultations"


def test_create_malformed_vacation_is_422(owner_id):
    response = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T18:00:00", "2026-05-04T14:00:00"),
    )
    assert response.status_code == 422


def test_conflicting_vacation_is_409(owner_id):
    client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T08:00:00", "2026-05-04T12:00:00"),
    )
    response = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T11:00:00", "2026-05-04T13:00:00"),
    )
    assert response.status_code == 409
    assert len(response.json()["conflicts"]) == 1


def test_update_and_delete_vacation(owner_id):
    created = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T08:00:00", "2026-05-04T12:00:00"),
    ).json()
    vacation_id = created["vacation"]["id"]

    patched = client.patch(f"/vacations/{vacation_id}", json={"title": "Téléconsultations"})
    assert patched.status_code == 200
    assert patched.json()["vacation"]["title"] == "Téléconsultations"

    assert client.delete(f"/vacations/{vacation_id}").json() == {"status": "deleted"}
    assert client.delete(f"/vacations/{vacation_id}").status_code == 404


def test_series_lifecycle(owner_id):
    response = client.post(
        f"/owners/{owner_id}/series",
        json={
            "vacation": _vacation("2026-06-01T09:00:00", "2026-06-01T10:00:00"),
            "rule": {"frequency": "weekly", "end_condition": {"kind": "count", "count": 3}},
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert len(body["vacations"]) == 3
    assert {s["type"] for s in body["time_slots"]} == {"custom"}

    group_id = body["recurrence_group_id"]
    deleted = client.delete(f"/owners/{owner_id}/series/{group_id}")
    assert deleted.json() == {"deleted": 3}
    assert client.get(f"/owners/{owner_id}/vacations").json() == []

    notes = client.get(f"/owners/{owner_id}/notifications").json()
    assert [n["title"] for n in notes] == [
        "Recurring vacation created",
        "Recurring vacation deleted",
    ]


def test_aware_and_naive_vacations_for_same_owner(owner_id):
    first = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T08:00:00Z", "2026-05-04T12:00:00Z"),
    )
    second = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-05T08:00:00", "2026-05-05T12:00:00"),
    )
    assert first.status_code == 201
    assert second.status_code == 201

    overlapping = client.post(
        f"/owners/{owner_id}/vacations",
        json=_vacation("2026-05-04T11:00:00", "2026-05-04T13:00:00"),
    )
    assert overlapping.status_code == 409


def test_validate_aware_candidate_against_naive_entry():
    response = client.post(
        "/conflicts/validate",
        json={
            "candidate": {
                "start": "2024-01-03T00:00:00+01:00",
                "end": "2024-01-05T00:00:00+01:00",
            },
            "existing": [
                {
                    "id": "a",
                    "owner_id": "doc-1",
                    "title": "Garde",
                    "range": {"start": "2024-01-01T00:00:00", "end": "2024-01-10T00:00:00"},
                }
            ],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["is_valid"] is False
    assert [c["conflicting_entry_id"] for c in body["conflicts"]] == ["a"]


def test_preview_past_last_representable_date_is_422():
    response = client.post(
        "/recurrence/preview",
        json={
            "base": {"start": "9999-11-15T08:00:00Z", "end": "9999-11-15T12:00:00Z"},
            "rule": {
                "frequency": "monthly",
                "end_condition": {"kind": "date", "until": "9999-12-31"},
            },
        },
    )
    assert response.status_code == 422
