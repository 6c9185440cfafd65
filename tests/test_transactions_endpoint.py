import asyncio
import uuid

from fastapi.testclient import TestClient

from emma.main import app
from emma.models import Event, Transaction
from emma.services.transactions import summarize_transactions
from tests.conftest import add_rows


def _entry(name, amount, type="Payment", method="Cash", ordering=1, **extra):
    entry = {"name": name, "amount": amount, "type": type, "method": method, "ordering": ordering}
    entry.update(extra)
    return entry


def test_transaction_crud(setup_database):
    log_id = str(uuid.uuid4())

    with TestClient(app) as client:
        created = client.post("/api/transactions", json=_entry("Deposit", 2500, log_id=log_id))
        transaction_id = created.json()["data"]["id"]
        fetched = client.get(f"/api/transactions/{transaction_id}")
        updated = client.put(f"/api/transactions/{transaction_id}", json={"amount": 3000})
        deleted = client.delete(f"/api/transactions/{transaction_id}")
        missing = client.get(f"/api/transactions/{transaction_id}")

    assert created.status_code == 201
    assert created.json()["message"] == "Transaction created successfully"
    assert fetched.json()["data"]["type"] == "Payment"
    assert updated.json()["data"]["amount"] == 3000
    assert updated.json()["data"]["name"] == "Deposit"
    assert deleted.json()["data"] == {"id": transaction_id}
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Transaction not found"}


def test_transaction_validation(setup_database):
    log_id = str(uuid.uuid4())

    with TestClient(app) as client:
        created = client.post("/api/transactions", json=_entry("Deposit", 100, log_id=log_id)).json()["data"]
        negative = client.put(f"/api/transactions/{created['id']}", json={"amount": -5})
        bad_type = client.post("/api/transactions", json=_entry("Gift", 100, type="Gift", log_id=log_id))
        no_log = client.post("/api/transactions", json=_entry("Orphan", 100))

    assert negative.status_code == 400
    assert negative.json()["error"] == "Validation error"
    assert any(detail["path"] == ["amount"] for detail in negative.json()["details"])
    assert bad_type.status_code == 400
    assert any(detail["path"] == ["type"] for detail in bad_type.json()["details"])
    assert no_log.status_code == 400
    assert any(detail["path"] == ["log_id"] for detail in no_log.json()["details"])


def test_bulk_create_and_list_by_log(setup_database):
    log_id = str(uuid.uuid4())
    entries = [
        _entry("Second", 200, ordering=2),
        _entry("First", 100, ordering=1),
    ]

    with TestClient(app) as client:
        created = client.post("/api/transactions", params={"log": log_id}, json=entries)
        listed = client.get("/api/transactions", params={"log": log_id}).json()

    assert created.status_code == 201
    assert created.json()["message"] == "Created 2 transactions"
    assert all(t["log_id"] == log_id for t in created.json()["data"])
    assert listed["count"] == 2
    assert [t["name"] for t in listed["data"]] == ["First", "Second"]


def test_bulk_replace_swaps_all_transactions_of_a_log(setup_database):
    log_id = str(uuid.uuid4())
    other_log = str(uuid.uuid4())

    with TestClient(app) as client:
        client.post("/api/transactions", params={"log": log_id}, json=[_entry("Old", 100)])
        client.post("/api/transactions", params={"log": other_log}, json=[_entry("Untouched", 100)])
        replaced = client.put(
            "/api/transactions",
            params={"log": log_id},
            json=[_entry("New A", 300, ordering=1), _entry("New B", 50, type="Expense", ordering=2)],
        )
        listed = client.get("/api/transactions", params={"log": log_id}).json()
        other = client.get("/api/transactions", params={"log": other_log}).json()

    assert replaced.status_code == 200
    assert replaced.json()["message"] == "Updated 2 transactions"
    assert [t["name"] for t in listed["data"]] == ["New A", "New B"]
    assert [t["name"] for t in other["data"]] == ["Untouched"]


def test_bulk_replace_requires_log(setup_database):
    with TestClient(app) as client:
        response = client.put("/api/transactions", json=[_entry("Nope", 100)])

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Bulk update requires log parameter"}


def test_invalid_bulk_payload_inserts_nothing(setup_database):
    log_id = str(uuid.uuid4())

    with TestClient(app) as client:
        response = client.post(
            "/api/transactions",
            params={"log": log_id},
            json=[_entry("Good", 100), _entry("Bad", 0)],
        )
        listed = client.get("/api/transactions", params={"log": log_id}).json()

    assert response.status_code == 400
    assert response.json()["details"][0]["path"] == [1, "amount"]
    assert listed["count"] == 0


def test_stats_for_event_log_include_expected_payments(setup_database):
    (event,) = asyncio.run(
        add_rows(
            Event(
                name="Costed",
                staff_cost=1000,
                staff_capacity=0,
                committed_staff=["s1", "s2"],
                participant_cost=5000,
                participant_capacity=3,
            )
        )
    )
    log = event.transaction_log_id
    asyncio.run(
        add_rows(
            Transaction(log_id=log, type="Payment", name="P1", amount=5000, method="Cash", ordering=1, payor_name="Sam"),
            Transaction(log_id=log, type="Payment", name="P2", amount=2500, method="Check", ordering=2, payor_name="Sam"),
            Transaction(log_id=log, type="Reimbursement", name="R", amount=500, method="Cash", ordering=3),
            Transaction(log_id=log, type="Refund", name="Back", amount=1000, method="Cash", ordering=4),
            Transaction(log_id=log, type="Expense", name="Food", amount=2000, method="Credit", ordering=5),
        )
    )

    with TestClient(app) as client:
        stats = client.get("/api/transactions/stats", params={"log": str(log)}).json()["data"]

    assert stats["active"] == 2
    assert stats["inactive"] == 1
    assert stats["total"] == 5
    assert stats["financial"] == {
        "total_amount": 5000,
        "total_inflows": 8000,
        "total_outflows": 3000,
        "average_transaction_size": 1000,
        "net_amount": 5000,
    }
    assert stats["by_type"] == {"Payment": 2, "Refund": 1, "Expense": 1, "Reimbursement": 1}
    assert stats["by_method"] == {"Cash": 3, "Check": 1, "Credit": 1}
    assert stats["by_payor"] == {"Sam": {"count": 2, "total": 7500}, "Unknown": {"count": 1, "total": 500}}
    assert stats["payments"] == {
        "expected_staff_payments": 2000,
        "expected_participant_payments": 15000,
        "total_expected_payments": 17000,
        "collected_payments": 7500,
        "remaining_payments": 9500,
    }


def test_stats_without_event_have_no_payment_section():
    transactions = [
        Transaction(log_id=uuid.uuid4(), type="Payment", name="Only", amount=100, method="Cash", ordering=1),
    ]
    stats = summarize_transactions(transactions)

    assert "payments" not in stats
    assert stats["financial"]["average_transaction_size"] == 100
    assert summarize_transactions([])["financial"]["average_transaction_size"] == 0
