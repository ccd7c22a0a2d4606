import pytest
from fastapi.testclient import TestClient

from interview_slots.main import app
from interview_slots.routers.slots import get_manager
from interview_slots.services.slots import (
    InMemoryStorageAdapter,
    OrmStorageAdapter,
    SlotConfig,
    SlotManager,
)

DAY = "2025-03-10"


@pytest.fixture
def client():
    manager = SlotManager(InMemoryStorageAdapter(), SlotConfig())
    app.dependency_overrides[get_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def book(client, start, end, date=DAY, **extra):
    return client.post("/slots", json={"date": date, "start_time": start, "end_time": end, **extra})


def test_book_slot(client):
    response = book(client, "09:00", "10:00", metadata={"notes": "screening"})

    assert response.status_code == 201
    data = response.json()
    assert data["date"] == DAY
    assert data["start_time"] == "09:00"
    assert data["duration"] == 30
    assert data["notes"] == "screening"

    fetched = client.get(f"/slots/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == data["id"]


def test_validation_error_is_400_with_field(client):
    response = book(client, "09:15", "10:00")

    assert response.status_code == 400
    assert response.json()["field"] == "startTime"


def test_conflict_is_409_with_conflicting_slots(client):
    first = book(client, "09:00", "10:00").json()

    response = book(client, "09:30", "10:30")

    assert response.status_code == 409
    body = response.json()
    assert [c["id"] for c in body["conflicts"]] == [first["id"]]


def test_missing_slot_is_404(client):
    assert client.get("/slots/nope").status_code == 404
    assert client.delete("/slots/nope").status_code == 404


def test_cancel_slot(client):
    slot = book(client, "09:00", "10:00").json()

    assert client.delete(f"/slots/{slot['id']}").status_code == 204
    assert client.get(f"/slots/{slot['id']}").status_code == 404


def test_batch_is_all_or_nothing(client):
    response = client.post("/slots/batch", json=[
        {"date": DAY, "start_time": "09:00", "end_time": "10:00"},
        {"date": DAY, "start_time": "09:30", "end_time": "10:30"},
    ])
    assert response.status_code == 409
    assert client.get("/slots", params={"date": DAY}).json() == []

    response = client.post("/slots/batch", json=[
        {"date": DAY, "start_time": "09:00", "end_time": "10:00"},
        {"date": DAY, "start_time": "10:00", "end_time": "10:30"},
    ])
    assert response.status_code == 201
    assert len(response.json()) == 2


def test_list_slots(client):
    book(client, "11:00", "12:00")
    book(client, "09:00", "10:00")
    book(client, "09:00", "10:00", date="2025-03-12")

    by_date = client.get("/slots", params={"date": DAY}).json()
    assert [s["start_time"] for s in by_date] == ["09:00", "11:00"]

    by_range = client.get("/slots", params={"start_date": DAY, "end_date": "2025-03-12"}).json()
    assert len(by_range) == 3

    page = client.get("/slots", params={"limit": 1, "offset": 2}).json()
    assert [s["date"] for s in page] == ["2025-03-12"]


def test_invalid_date_query_is_400(client):
    response = client.get("/slots", params={"date": "2025-02-30"})
    assert response.status_code == 400
    assert response.json()["field"] == "date"


def test_free_windows(client):
    book(client, "09:00", "10:00")
    book(client, "11:00", "12:00")

    response = client.get("/slots/free", params={"date": DAY, "start_hour": 9, "end_hour": 13})

    assert response.status_code == 200
    body = response.json()
    assert body["windows"] == [
        {"start_time": "10:00", "end_time": "11:00"},
        {"start_time": "12:00", "end_time": "13:00"},
    ]
    assert body["available_minutes"] == 120


def test_free_windows_bad_hours_is_400(client):
    response = client.get("/slots/free", params={"date": DAY, "start_hour": 12, "end_hour": 9})
    assert response.status_code == 400


def test_availability_check(client):
    book(client, "09:00", "10:00")

    taken = client.get("/slots/availability", params={"date": DAY, "start_time": "09:30", "end_time": "10:30"})
    free = client.get("/slots/availability", params={"date": DAY, "start_time": "10:00", "end_time": "10:30"})

    assert taken.json()["available"] is False
    assert free.json()["available"] is True


def test_conflicts_audit_empty_without_overlaps(client):
    book(client, "09:00", "10:00")
    assert client.get("/slots/conflicts", params={"date": DAY}).json() == []


def test_stats(client):
    book(client, "09:00", "10:30")

    body = client.get("/slots/stats", params={"date": DAY, "start_hour": 9, "end_hour": 12}).json()

    assert body["slot_count"] == 1
    assert body["booked_minutes"] == 90
    assert body["available_minutes"] == 90
    assert body["slot_step_minutes"] == 30


def test_grid(client):
    book(client, "09:00", "10:00")

    body = client.get("/slots/grid", params={"date": DAY}).json()

    assert body["slots_per_day"] == 48
    busy = [cell["time"] for cell in body["slots"] if not cell["is_available"]]
    assert busy == ["09:00", "09:30"]


def test_bookable_chunks(client):
    slot = book(client, "09:00", "10:30").json()

    body = client.get(f"/slots/{slot['id']}/bookable", params={"duration": 45}).json()

    assert body["duration"] == 45
    assert body["chunks"] == [
        {"start_time": "09:00", "end_time": "09:45"},
        {"start_time": "09:45", "end_time": "10:30"},
    ]


def test_cancel_day(client):
    book(client, "09:00", "10:00")
    book(client, "11:00", "12:00")

    response = client.delete("/slots", params={"date": DAY})

    assert response.json() == {"date": DAY, "deleted": 2}


def test_health():
    response = TestClient(app).get("/health")
    assert response.json()["status"] == "ok"


def test_booking_without_owner_on_host_table_is_400(session_factory):
    manager = SlotManager(OrmStorageAdapter(session_factory), SlotConfig())
    app.dependency_overrides[get_manager] = lambda: manager
    try:
        client = TestClient(app)
        single = book(client, "09:00", "10:00")
        batch = client.post("/slots/batch", json=[{"date": DAY, "start_time": "09:00", "end_time": "10:00"}])
    finally:
        app.dependency_overrides.clear()

    assert single.status_code == 400
    assert single.json()["field"] == "interviewer_id"
    assert batch.status_code == 400
