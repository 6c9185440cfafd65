import asyncio
from uuid import UUID

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import Event, Person, Prospect, Registrant, Warrior
from emma.services.warriors import warrior_stats
from tests.conftest import AsyncSessionLocal, add_rows

MISSING_ID = "3f1e2d4c-5b6a-4789-9abc-def012345678"


def _event(name="Weekend Training"):
    (event,) = asyncio.run(add_rows(Event(name=name)))
    return event


def test_create_warrior_returns_flat_record(setup_database):
    event = _event()
    payload = {
        "first_name": "Michael",
        "last_name": "Meade",
        "initiation_id": str(event.id),
        "initiation_on": "2020-05-17",
        "training_events": [str(event.id)],
    }

    with TestClient(app) as client:
        response = client.post("/api/warriors", json=payload)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["first_name"] == "Michael"
    assert data["status"] == "Initiated"
    assert data["initiation_id"] == str(event.id)
    assert data["training_events"] == [str(event.id)]
    assert data["log_id"] is not None

    async def verify_rows():
        async with AsyncSessionLocal() as session:
            return await session.get(Person, UUID(data["id"])), await session.get(Warrior, UUID(data["id"]))

    person, warrior = asyncio.run(verify_rows())
    assert person is not None and warrior is not None


def test_warrior_with_unknown_initiation_event_is_rejected(setup_database):
    with TestClient(app) as client:
        response = client.post(
            "/api/warriors",
            json={"first_name": "No", "last_name": "Event", "initiation_id": MISSING_ID},
        )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Initiation event not found"}


def test_updating_unknown_records_is_not_found_before_reference_checks(setup_database):
    with TestClient(app) as client:
        warrior = client.put(f"/api/warriors/{MISSING_ID}", json={"initiation_id": MISSING_ID})
        registrant = client.put(f"/api/registrants/{MISSING_ID}", json={"event_id": MISSING_ID})

    assert warrior.status_code == 404
    assert warrior.json() == {"success": False, "error": "Warrior not found"}
    assert registrant.status_code == 404
    assert registrant.json() == {"success": False, "error": "Registrant not found"}


def test_update_warrior_touches_both_rows(setup_database):
    with TestClient(app) as client:
        created = client.post("/api/warriors", json={"first_name": "Old", "last_name": "Name"}).json()["data"]
        updated = client.put(
            f"/api/warriors/{created['id']}",
            json={"first_name": "New", "status": "Staffed", "is_active": False},
        )

    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["first_name"] == "New"
    assert data["last_name"] == "Name"
    assert data["status"] == "Staffed"
    assert data["is_active"] is False


def test_delete_warrior_removes_person_and_extension(setup_database):
    with TestClient(app) as client:
        created = client.post("/api/warriors", json={"first_name": "Short", "last_name": "Lived"}).json()["data"]
        deleted = client.delete(f"/api/warriors/{created['id']}")
        warrior = client.get(f"/api/warriors/{created['id']}")
        person = client.get(f"/api/people/{created['id']}")

    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"id": created["id"]}
    assert warrior.status_code == 404
    assert warrior.json()["error"] == "Warrior not found"
    assert person.status_code == 404


def test_list_warriors_filters_by_status(setup_database):
    with TestClient(app) as client:
        client.post("/api/warriors", json={"first_name": "Lead", "last_name": "Filter", "status": "Leader"})
        response = client.get("/api/warriors", params={"status": "Leader", "search": "filter"})

    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["status"] == "Leader"


def test_warrior_stats_counts_statuses(setup_database):
    with TestClient(app) as client:
        stats = client.get("/api/warriors/stats").json()["data"]

    assert stats["total"] == stats["active"] + stats["inactive"]
    assert sum(stats["by_status"].values()) == stats["total"]

    async def verify_service():
        async with AsyncSessionLocal() as session:
            return await warrior_stats(session)

    assert asyncio.run(verify_service()) == stats


def test_registrant_requires_existing_event(setup_database):
    event = _event("Open Day")

    with TestClient(app) as client:
        unknown = client.post(
            "/api/registrants",
            json={"first_name": "Lost", "last_name": "Soul", "event_id": MISSING_ID},
        )
        missing = client.post("/api/registrants", json={"first_name": "No", "last_name": "Event"})
        created = client.post(
            "/api/registrants",
            json={"first_name": "Found", "last_name": "Way", "event_id": str(event.id)},
        )
        bad_update = client.put(
            f"/api/registrants/{created.json()['data']['id']}",
            json={"event_id": MISSING_ID},
        )

    assert unknown.status_code == 400
    assert unknown.json()["error"] == "Event not found"
    assert missing.status_code == 400
    assert missing.json()["error"] == "Validation error"
    assert created.status_code == 201
    assert created.json()["data"]["event_id"] == str(event.id)
    assert bad_update.status_code == 400
    assert bad_update.json()["error"] == "Event not found"


def test_list_registrants_by_event(setup_database):
    first = _event("First")
    second = _event("Second")
    asyncio.run(
        add_rows(
            Person(id=UUID("5a0e7b52-1111-4c2b-9d5e-000000000001"), first_name="A", last_name="One"),
            Person(id=UUID("5a0e7b52-1111-4c2b-9d5e-000000000002"), first_name="B", last_name="Two"),
        )
    )
    asyncio.run(
        add_rows(
            Registrant(id=UUID("5a0e7b52-1111-4c2b-9d5e-000000000001"), event_id=first.id),
            Registrant(id=UUID("5a0e7b52-1111-4c2b-9d5e-000000000002"), event_id=second.id),
        )
    )

    with TestClient(app) as client:
        body = client.get("/api/registrants", params={"event_id": str(second.id)}).json()

    assert body["count"] == 1
    assert body["data"][0]["last_name"] == "Two"


def test_prospect_crud_and_stats(setup_database):
    with TestClient(app) as client:
        created = client.post(
            "/api/prospects",
            json={"first_name": "Maybe", "last_name": "Later", "balked_events": []},
        )
        prospect_id = created.json()["data"]["id"]
        updated = client.put(f"/api/prospects/{prospect_id}", json={"is_active": False})
        stats = client.get("/api/prospects/stats").json()["data"]
        deleted = client.delete(f"/api/prospects/{prospect_id}")
        missing = client.get(f"/api/prospects/{prospect_id}")

    assert created.status_code == 201
    assert updated.json()["data"]["is_active"] is False
    assert stats == {"active": 0, "inactive": 1, "total": 1}
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["error"] == "Prospect not found"


def test_person_without_extension_is_not_a_prospect(setup_database):
    (person,) = asyncio.run(add_rows(Person(first_name="Plain", last_name="Person")))

    with TestClient(app) as client:
        response = client.get(f"/api/prospects/{person.id}")

    assert response.status_code == 404

    async def verify_rows():
        async with AsyncSessionLocal() as session:
            return await session.get(Prospect, person.id)

    assert asyncio.run(verify_rows()) is None
