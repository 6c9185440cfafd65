import asyncio
from uuid import UUID

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import Address, Group, Person, Venue
from tests.conftest import AsyncSessionLocal, add_rows

NEW_YORK = {"lat": 40.7128, "lon": -74.0060}


def _i_group(client, name, **fields):
    payload = {"name": name, "description": f"{name} meets weekly", **fields}
    response = client.post("/api/i-groups", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def _names(response):
    return [record["name"] for record in response.json()["data"]]


def test_group_crud_and_soft_delete(setup_database):
    with TestClient(app) as client:
        created = client.post("/api/groups", json={"name": "Base Camp", "description": "Monthly circle"})
        group_id = created.json()["data"]["id"]
        updated = client.put(f"/api/groups/{group_id}", json={"description": "Weekly circle"})
        listed = client.get("/api/groups", params={"search": "base camp"}).json()
        deleted = client.delete(f"/api/groups/{group_id}")
        fetched = client.get(f"/api/groups/{group_id}")
        after = client.get("/api/groups", params={"search": "base camp"}).json()

    assert created.status_code == 201
    assert created.json()["data"]["is_publicly_listed"] is False
    assert updated.json()["data"]["description"] == "Weekly circle"
    assert listed["count"] == 1
    assert deleted.json()["data"] == {"id": group_id}
    assert fetched.status_code == 404
    assert fetched.json()["error"] == "Group not found"
    assert after["count"] == 0


def test_i_group_defaults_members_and_contacts(setup_database):
    contact, member = asyncio.run(
        add_rows(
            Person(first_name="Pat", last_name="Contact", email="pat@example.com"),
            Person(first_name="Max", last_name="Member"),
        )
    )

    with TestClient(app) as client:
        created = _i_group(
            client,
            "Riverside",
            public_contact_id=str(contact.id),
            members=[str(member.id)],
            schedule_events=[{"start": "2026-10-20T19:00:00Z", "end": "2026-10-20T21:00:00Z"}],
        )
        fetched = client.get(f"/api/i-groups/{created['id']}").json()["data"]

    assert created["is_accepting_new_members"] is True
    assert created["is_publicly_listed"] is True
    assert created["is_accepting_initiated_visitors"] is True
    assert created["is_accepting_uninitiated_visitors"] is False
    assert created["public_contact"]["email"] == "pat@example.com"
    assert created["area"] is None
    assert created["schedule_events"][0]["start"] == "2026-10-20T19:00:00+00:00"
    assert fetched["member_ids"] == [str(member.id)]
    assert [m["first_name"] for m in fetched["members"]] == ["Max"]


def test_i_groups_within_radius_are_sorted_by_distance(setup_database):
    with TestClient(app) as client:
        _i_group(client, "Harbor Philadelphia", latitude=39.9526, longitude=-75.1652)
        _i_group(client, "Harbor Newark", latitude=40.7357, longitude=-74.1724)
        _i_group(client, "Harbor Unmapped")

        default_radius = client.get("/api/i-groups", params={"search": "harbor", **NEW_YORK})
        wide = client.get("/api/i-groups", params={"search": "harbor", "rad": "100", **NEW_YORK})
        by_name = client.get(
            "/api/i-groups",
            params={"search": "harbor", "radius": "100mi", "by": "name", "order": "descending", **NEW_YORK},
        )
        everywhere = client.get("/api/i-groups", params={"search": "harbor"})
        bad_radius = client.get("/api/i-groups", params={"rad": "-5", **NEW_YORK})

    assert _names(default_radius) == ["Harbor Newark"]
    nearest = default_radius.json()["data"][0]
    assert nearest["distance_units"] == "meters"
    assert 10_000 < nearest["distance"] < 20_000
    assert _names(wide) == ["Harbor Newark", "Harbor Philadelphia"]
    assert _names(by_name) == ["Harbor Philadelphia", "Harbor Newark"]
    assert everywhere.json()["count"] == 3
    assert bad_radius.status_code == 400
    assert bad_radius.json()["error"] == "Invalid radius"


def test_i_group_schedule_and_location_filters(setup_database):
    (address,) = asyncio.run(
        add_rows(Address(address_1="1 Pearl St", city="Boulder", state="CO", postal_code="80302"))
    )
    (venue,) = asyncio.run(add_rows(Venue(name="Pearl Hall", physical_address_id=address.id)))

    with TestClient(app) as client:
        _i_group(
            client,
            "Filter Tuesday",
            venue_id=str(venue.id),
            is_accepting_uninitiated_visitors=True,
            schedule_events=[{"start": "2026-10-20T19:00:00Z", "end": "2026-10-20T21:00:00Z"}],
        )
        _i_group(
            client,
            "Filter Saturday",
            schedule_events=[{"start": "2026-10-24T09:00:00Z", "end": "2026-10-24T11:00:00Z"}],
        )

        def listed(**params):
            return client.get("/api/i-groups", params={"search": "filter", **params})

        on_tuesday = listed(days="tue")
        on_weekend = listed(days="sat,sun")
        in_boulder = listed(city="BOULDER", state="co")
        in_zipcode = listed(zipcode="80302")
        open_to_all = listed(uninitiated="true")
        evening = listed(time="18:30")
        on_date = listed(dates="2026-10-24T09:30:00Z")
        bad_date = listed(dates="someday")

    assert _names(on_tuesday) == ["Filter Tuesday"]
    assert _names(on_weekend) == ["Filter Saturday"]
    assert _names(in_boulder) == ["Filter Tuesday"]
    assert in_boulder.json()["data"][0]["venue"]["physical_address"]["city"] == "Boulder"
    assert _names(in_zipcode) == ["Filter Tuesday"]
    assert _names(open_to_all) == ["Filter Tuesday"]
    assert _names(evening) == ["Filter Tuesday"]
    assert _names(on_date) == ["Filter Saturday"]
    assert bad_date.status_code == 400
    assert bad_date.json()["error"] == "Invalid dates parameter"


def test_i_group_stats_report_nearby_groups(setup_database):
    fairbanks = {"lat": 64.8378, "lon": -147.7164}
    with TestClient(app) as client:
        _i_group(client, "Aurora", latitude=64.8401, longitude=-147.7200, is_accepting_uninitiated_visitors=True)
        _i_group(client, "Aurora Dormant", latitude=64.8450, longitude=-147.7000, is_active=False)
        stats = client.get("/api/i-groups/stats", params={"rad": "10", **fairbanks}).json()["data"]
        plain = client.get("/api/i-groups/stats").json()["data"]

    assert stats["nearby"] == {
        "radius_miles": 10.0,
        "latitude": 64.8378,
        "longitude": -147.7164,
        "active": 1,
        "inactive": 1,
        "total": 2,
        "accepting_initiated_visitors": 1,
        "accepting_uninitiated_visitors": 1,
    }
    assert plain["total"] == plain["active"] + plain["inactive"]
    assert plain["accepting_uninitiated_visitors"] >= 1
    assert "nearby" not in plain


def test_i_group_delete_hides_the_group(setup_database):
    with TestClient(app) as client:
        created = _i_group(client, "Vanishing")
        deleted = client.delete(f"/api/i-groups/{created['id']}")
        fetched = client.get(f"/api/i-groups/{created['id']}")
        listed = client.get("/api/i-groups", params={"search": "vanishing"}).json()

    assert deleted.status_code == 200
    assert fetched.status_code == 404
    assert fetched.json()["error"] == "Integration group not found"
    assert listed["count"] == 0


def test_f_group_type_filter_and_hard_delete(setup_database):
    with TestClient(app) as client:
        created = client.post(
            "/api/f-groups",
            json={"name": "Circle of Keys", "description": "Facilitators", "group_type": "Mixed Gender"},
        )
        group_id = created.json()["data"]["id"]
        bad_type = client.post(
            "/api/f-groups", json={"name": "Odd", "description": "x", "group_type": "Other"}
        )
        mixed = client.get("/api/f-groups", params={"group_type": "Mixed Gender", "search": "keys"}).json()
        updated = client.put(f"/api/f-groups/{group_id}", json={"group_type": "Open Men's"})
        deleted = client.delete(f"/api/f-groups/{group_id}")
        fetched = client.get(f"/api/f-groups/{group_id}")

    async def base_row():
        async with AsyncSessionLocal() as session:
            return await session.get(Group, UUID(group_id))

    assert created.status_code == 201
    assert created.json()["data"]["is_accepting_new_facilitators"] is True
    assert bad_type.status_code == 400
    assert mixed["count"] == 1
    assert updated.json()["data"]["group_type"] == "Open Men's"
    assert deleted.status_code == 200
    assert fetched.status_code == 404
    assert asyncio.run(base_row()) is None
