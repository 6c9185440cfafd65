import asyncio
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import EmmaUser
from emma.services.users import list_users
from tests.conftest import AsyncSessionLocal, add_rows


def _seed_users():
    return asyncio.run(
        add_rows(
            EmmaUser(
                auth0_user={"given_name": "Aaron", "family_name": "Kipnis", "email": "aaron@example.com"},
                approved_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            ),
            EmmaUser(
                civicrm_user={"first_name": "Bill", "last_name": "Kauth", "email_primary": "bill@example.com"},
                drupal_user={"first_name": "Bill", "last_name": "Kauth", "email_primary": "bill@example.com"},
            ),
        )
    )


def test_list_users_filters(setup_database):
    _seed_users()

    with TestClient(app) as client:
        approved = client.get("/api/users", params={"approved": "true"}).json()
        pending = client.get("/api/users", params={"approved": "false"}).json()
        by_email = client.get("/api/users", params={"email": "bill@example.com"}).json()
        by_name = client.get("/api/users", params={"search": "kip"}).json()

    assert approved["count"] == 1
    assert approved["data"][0]["auth0_user"]["given_name"] == "Aaron"
    assert pending["count"] == 1
    assert by_email["count"] == 1
    assert by_email["data"][0]["civicrm_user"]["first_name"] == "Bill"
    assert [u["auth0_user"]["family_name"] for u in by_name["data"]] == ["Kipnis"]

    async def verify_service():
        async with AsyncSessionLocal() as session:
            return await list_users(session, search="KAUTH")

    assert len(asyncio.run(verify_service())) == 1


def test_user_stats(setup_database):
    with TestClient(app) as client:
        stats = client.get("/api/users/stats").json()["data"]

    assert stats["approved"] == 1
    assert stats["pending"] == 1
    assert stats["total"] == 2
    assert stats["by_auth_source"] == {"auth0": 1, "civicrm": 1, "drupal": 1}


def test_update_user_by_query_parameter(setup_database):
    with TestClient(app) as client:
        created = client.post("/api/users", json={"auth0_user": {"email": "new@example.com"}})
        user_id = created.json()["data"]["id"]
        approved = client.put(
            "/api/users",
            params={"id": user_id},
            json={"approved_at": "2026-01-02T03:04:05Z"},
        )
        without_id = client.put("/api/users", json={"approved_at": None})
        by_path = client.put(f"/api/users/{user_id}", json={"other_people": ["someone"]})

    assert created.status_code == 201
    assert created.json()["data"]["approved_at"] is None
    assert approved.status_code == 200
    assert approved.json()["data"]["approved_at"].startswith("2026-01-02T03:04:05")
    assert without_id.status_code == 400
    assert without_id.json() == {"success": False, "error": "User ID is required"}
    assert by_path.json()["data"]["other_people"] == ["someone"]
    assert by_path.json()["data"]["auth0_user"] == {"email": "new@example.com"}


def test_delete_user(setup_database):
    with TestClient(app) as client:
        user_id = client.post("/api/users", json={}).json()["data"]["id"]
        deleted = client.delete(f"/api/users/{user_id}")
        missing = client.get(f"/api/users/{user_id}")

    assert deleted.json()["data"] == {"id": user_id}
    assert missing.status_code == 404
    assert missing.json()["error"] == "User not found"
