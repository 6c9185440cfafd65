from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from emma.main import app

RESOURCES = [
    ("/api/people", {}),
    ("/api/warriors", {"initiation_id": str(uuid4())}),
    ("/api/registrants", {"event_id": str(uuid4())}),
    ("/api/prospects", {}),
    ("/api/events", {}),
    ("/api/nwta-events", {}),
    ("/api/event-types", {}),
    ("/api/venues", {}),
    ("/api/addresses", {}),
    ("/api/areas", {}),
    ("/api/communities", {}),
    ("/api/groups", {}),
    ("/api/i-groups", {}),
    ("/api/f-groups", {}),
    ("/api/transactions", {}),
    ("/api/users", {}),
]


@pytest.mark.parametrize("base, update", RESOURCES, ids=[base for base, _ in RESOURCES])
def test_unknown_id_is_not_found_for_read_update_and_delete(setup_database, base, update):
    path = f"{base}/{uuid4()}"
    with TestClient(app) as client:
        responses = [client.get(path), client.put(path, json=update), client.delete(path)]

    for response in responses:
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"].endswith("not found")


def test_admins_of_unknown_area_are_not_found(setup_database):
    with TestClient(app) as client:
        response = client.get(f"/api/areas/{uuid4()}/admins")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Area not found"}
