import asyncio
from uuid import UUID

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import EventType, NwtaRole, NwtaRoleType, Person, Warrior
from tests.conftest import add_rows

WEEKEND = [
    {"start": "2026-11-06T18:00:00Z", "end": "2026-11-06T23:00:00Z"},
    {"start": "2026-11-07T08:00:00Z", "end": "2026-11-08T16:00:00Z"},
]


def test_nwta_event_lifecycle(setup_database):
    (nwta_type,) = asyncio.run(add_rows(EventType(name="New Warrior Training Adventure", code="NWTA")))
    (rookie,) = asyncio.run(add_rows(Person(first_name="Rookie", last_name="One")))

    with TestClient(app) as client:
        created = client.post(
            "/api/nwta-events",
            json={"name": "Fall Adventure", "participant_schedule": WEEKEND, "rookies": [str(rookie.id)]},
        )
        event_id = created.json()["data"]["id"]
        unpublished = client.get("/api/nwta-events", params={"published": "false", "search": "fall"}).json()
        updated = client.put(f"/api/nwta-events/{event_id}", json={"is_published": True, "mos": [str(rookie.id)]})
        published = client.get("/api/nwta-events", params={"published": "true", "search": "fall"}).json()
        deleted = client.delete(f"/api/nwta-events/{event_id}")
        fetched = client.get(f"/api/nwta-events/{event_id}")
        as_event = client.get(f"/api/events/{event_id}")

    assert created.status_code == 201
    data = created.json()["data"]
    assert data["event_type_id"] == str(nwta_type.id)
    assert data["rookies"] == [str(rookie.id)]
    assert data["elders"] == []
    assert data["roles"] == []
    assert data["start_at"].startswith("2026-11-06T18:00:00")
    assert data["end_at"].startswith("2026-11-08T16:00:00")
    assert unpublished["count"] == 1
    assert updated.json()["data"]["mos"] == [str(rookie.id)]
    assert updated.json()["data"]["rookies"] == [str(rookie.id)]
    assert [e["id"] for e in published["data"]] == [event_id]
    assert deleted.json()["data"] == {"id": event_id}
    assert fetched.status_code == 404
    assert fetched.json()["error"] == "NWTA event not found"
    assert as_event.status_code == 404


def test_nwta_event_embeds_roles_with_leads(setup_database):
    (lead,) = asyncio.run(add_rows(Person(first_name="Lead", last_name="Man", email="lead@example.com")))
    asyncio.run(add_rows(Warrior(id=lead.id)))
    (role_type,) = asyncio.run(add_rows(NwtaRoleType(name="Ritual Lead", work_points=3)))

    with TestClient(app) as client:
        event_id = client.post("/api/nwta-events", json={"name": "Spring Adventure"}).json()["data"]["id"]
        asyncio.run(
            add_rows(
                NwtaRole(
                    name="Sacred Space",
                    nwta_event_id=UUID(event_id),
                    role_type_id=role_type.id,
                    lead_warrior_id=lead.id,
                )
            )
        )
        fetched = client.get(f"/api/nwta-events/{event_id}").json()["data"]

    (role,) = fetched["roles"]
    assert role["name"] == "Sacred Space"
    assert role["role_type"]["name"] == "Ritual Lead"
    assert role["role_type"]["work_points"] == 3
    assert role["lead_warrior"] == {
        "id": str(lead.id),
        "person": {"first_name": "Lead", "last_name": "Man", "email": "lead@example.com"},
    }


def test_nwta_published_filter_rejects_other_values(setup_database):
    with TestClient(app) as client:
        response = client.get("/api/nwta-events", params={"published": "yes"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Invalid published parameter. Only 'true' or 'false' are accepted.",
    }
