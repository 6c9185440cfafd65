import asyncio

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import Area, Community, Person
from tests.conftest import add_rows


def test_area_crud_and_archive(setup_database):
    with TestClient(app) as client:
        created = client.post("/api/areas", json={"name": "Northeast", "code": "NE"})
        area_id = created.json()["data"]["id"]
        updated = client.put(f"/api/areas/{area_id}", json={"description": "Coastal"})
        archived = client.delete(f"/api/areas/{area_id}")
        fetched = client.get(f"/api/areas/{area_id}")
        active = client.get("/api/areas", params={"active": "true", "search": "northeast"}).json()

    assert created.status_code == 201
    assert created.json()["data"]["color"] == "#3B82F6"
    assert updated.json()["data"]["description"] == "Coastal"
    assert archived.status_code == 200
    assert archived.json()["data"] == {"id": area_id}
    assert fetched.status_code == 200
    assert fetched.json()["data"]["is_active"] is False
    assert active["count"] == 0


def test_area_code_must_be_unique(setup_database):
    with TestClient(app) as client:
        client.post("/api/areas", json={"name": "Southwest", "code": "SW"})
        duplicate = client.post("/api/areas", json={"name": "Other", "code": "SW"})
        too_long = client.post("/api/areas", json={"name": "Long", "code": "SEVENCH"})

    assert duplicate.status_code == 400
    assert duplicate.json() == {"success": False, "error": "Area code must be unique"}
    assert too_long.status_code == 400


def test_area_search_matches_code(setup_database):
    asyncio.run(add_rows(Area(name="Great Lakes", code="GLK")))

    with TestClient(app) as client:
        body = client.get("/api/areas", params={"search": "glk"}).json()

    assert [a["name"] for a in body["data"]] == ["Great Lakes"]


def test_community_filters_and_archive(setup_database):
    (area,) = asyncio.run(add_rows(Area(name="Midwest", code="MW")))
    asyncio.run(
        add_rows(
            Community(name="Chicago", code="CHI", area_id=area.id),
            Community(name="Denver", code="DEN"),
        )
    )

    with TestClient(app) as client:
        in_area = client.get("/api/communities", params={"area_id": str(area.id)}).json()
        created = client.post("/api/communities", json={"name": "Austin", "code": "AUS", "area_id": ""})
        duplicate = client.post("/api/communities", json={"name": "Austin 2", "code": "AUS"})
        archived = client.delete(f"/api/communities/{created.json()['data']['id']}")
        inactive = client.get("/api/communities", params={"active": "false"}).json()

    assert [c["name"] for c in in_area["data"]] == ["Chicago"]
    assert created.status_code == 201
    assert created.json()["data"]["color"] == "#10B981"
    assert created.json()["data"]["area_id"] is None
    assert duplicate.json()["error"] == "Community code must be unique"
    assert archived.status_code == 200
    assert [c["name"] for c in inactive["data"]] == ["Austin"]


def test_area_image_upload_and_delete(setup_database, fake_bucket):
    (area,) = asyncio.run(add_rows(Area(name="Pictured", code="PIC")))

    with TestClient(app) as client:
        uploaded = client.post(
            f"/api/areas/{area.id}/image",
            files={"file": ("map.jpg", b"0" * (6 * 1024 * 1024), "image/jpeg")},
        )
        deleted = client.delete(f"/api/areas/{area.id}/image")
        again = client.delete(f"/api/areas/{area.id}/image")

    assert uploaded.status_code == 200
    filename = uploaded.json()["data"]["filename"]
    assert filename.startswith(f"areas/{area.id}-")
    assert deleted.status_code == 200
    assert fake_bucket.removed == [filename]
    assert again.status_code == 404
    assert again.json()["error"] == "No image to delete"


def test_community_image_requires_storage_configuration(setup_database, monkeypatch):
    from emma.core import config
    from emma.db import supabase_client

    (community,) = asyncio.run(add_rows(Community(name="Unstored", code="UNS")))
    monkeypatch.setattr(config, "SUPABASE_URL", None)
    monkeypatch.setattr(supabase_client, "_client", None)

    with TestClient(app) as client:
        response = client.post(
            f"/api/communities/{community.id}/image",
            files={"file": ("logo.png", b"png", "image/png")},
        )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Storage not configured"}


def test_color_cannot_be_null(setup_database):
    (existing,) = asyncio.run(add_rows(Area(name="Colored", code="COL")))

    with TestClient(app) as client:
        area = client.post("/api/areas", json={"name": "Nulled", "code": "NUL", "color": None})
        community = client.post("/api/communities", json={"name": "Nulled", "code": "NUL", "color": None})
        update = client.put(f"/api/areas/{existing.id}", json={"color": None})

    assert area.status_code == 400
    assert area.json()["details"][0]["path"] == ["color"]
    assert community.status_code == 400
    assert update.status_code == 400


def test_area_admins_add_list_replace_and_remove(setup_database):
    (area,) = asyncio.run(add_rows(Area(name="Administered", code="ADM")))
    first, second, third = asyncio.run(
        add_rows(
            Person(first_name="Ada", last_name="Admin", email="ada@example.com"),
            Person(first_name="Bo", last_name="Admin"),
            Person(first_name="Cy", last_name="Admin"),
        )
    )
    admins = f"/api/areas/{area.id}/admins"

    with TestClient(app) as client:
        added = client.post(admins, json={"person_id": str(first.id)})
        duplicate = client.post(admins, json={"person_id": str(first.id)})
        unknown = client.post(admins, json={"person_id": "5a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d"})
        replaced = client.put(admins, json={"admin_ids": [str(second.id), str(third.id), str(second.id)]})
        removed = client.delete(admins, params={"person_id": str(third.id)})
        no_person = client.delete(admins)
        listed = client.get(admins).json()

    assert added.status_code == 201
    assert added.json()["data"]["email"] == "ada@example.com"
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "Person is already an admin for this area"
    assert unknown.json()["error"] == "Invalid area or person ID"
    assert [a["first_name"] for a in replaced.json()["data"]] == ["Bo", "Cy"]
    assert removed.status_code == 200
    assert no_person.status_code == 400
    assert no_person.json()["error"] == "Person ID is required"
    assert listed["count"] == 1
    assert listed["data"][0]["id"] == str(second.id)
