from datetime import datetime, timezone

import pytest

from emma.models import Event
from emma.services.publication import PublicationStatus, publication_status, publication_summary

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
WINDOW = {"start": "2026-03-01T00:00:00+00:00", "end": "2026-03-31T00:00:00+00:00"}


def _event(**overrides):
    fields = {
        "name": "Spring Weekend",
        "is_published": True,
        "participant_published_time": WINDOW,
        "staff_published_time": WINDOW,
        "participant_capacity": 2,
        "committed_participants": ["a"],
    }
    fields.update(overrides)
    return Event(**fields)


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"is_published": False}, PublicationStatus.HIDDEN),
        ({"participant_published_time": None}, PublicationStatus.HIDDEN),
        ({"participant_published_time": {"start": "2026-04-01T00:00:00Z", "end": "2026-04-30T00:00:00Z"}}, PublicationStatus.PREVIEW),
        ({"participant_published_time": {"start": "2026-02-01T00:00:00Z", "end": "2026-02-28T00:00:00Z"}}, PublicationStatus.CLOSED),
        ({"participant_capacity": 0, "committed_participants": ["a", "b", "c"]}, PublicationStatus.OPEN),
        ({"committed_participants": ["a", "b"]}, PublicationStatus.FULL),
        ({}, PublicationStatus.OPEN),
    ],
)
def test_participant_status(overrides, expected):
    assert publication_status(_event(**overrides), "participants", NOW) is expected


def test_unpublished_event_is_hidden_even_inside_window():
    event = _event(is_published=False, participant_capacity=0)
    assert publication_status(event, "participants", NOW) is PublicationStatus.HIDDEN


def test_staff_status_uses_staff_capacity():
    event = _event(staff_capacity=1, committed_staff=["x"])
    assert publication_status(event, "staff", NOW) is PublicationStatus.FULL


def test_window_edges_are_open():
    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    end = datetime(2026, 3, 31, tzinfo=timezone.utc)
    event = _event()
    assert publication_status(event, "participants", start) is PublicationStatus.OPEN
    assert publication_status(event, "participants", end) is PublicationStatus.OPEN


def test_summary_accepts_plain_mappings():
    record = {
        "is_published": True,
        "staff_published_time": None,
        "participant_published_time": WINDOW,
        "participant_capacity": 0,
        "committed_participants": [],
    }
    assert publication_summary(record, NOW) == {"staff": "Hidden", "participants": "Open"}


def test_staff_at_capacity_is_full():
    event = _event(staff_capacity=10, committed_staff=[str(i) for i in range(10)])
    assert publication_status(event, "staff", NOW) is PublicationStatus.FULL
