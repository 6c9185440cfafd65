from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union

from emma.models import Event


class PublicationStatus(str, Enum):
    HIDDEN = "Hidden"
    PREVIEW = "Preview"
    OPEN = "Open"
    FULL = "Full"
    CLOSED = "Closed"


class Audience(str, Enum):
    STAFF = "staff"
    PARTICIPANTS = "participants"


def _field(event: Union[Event, Mapping[str, Any]], name: str, default=None):
    if isinstance(event, Mapping):
        value = event.get(name, default)
    else:
        value = getattr(event, name, default)
    return default if value is None else value


def as_utc(value: Union[str, datetime]) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def publication_status(
    event: Union[Event, Mapping[str, Any]],
    audience: Union[Audience, str],
    now: Optional[datetime] = None,
) -> PublicationStatus:
    """Derive the sign-up status of an event for staff or participants.

    The status is never stored. It follows from ``is_published``, the
    audience's published window, its capacity and how many people are
    committed. A capacity of 0 means there is no limit.
    """
    audience = Audience(audience)
    now = as_utc(now or datetime.now(timezone.utc))

    if not _field(event, "is_published", False):
        return PublicationStatus.HIDDEN

    if audience is Audience.STAFF:
        window = _field(event, "staff_published_time")
        capacity = _field(event, "staff_capacity", 0)
        committed = len(_field(event, "committed_staff", []))
    else:
        window = _field(event, "participant_published_time")
        capacity = _field(event, "participant_capacity", 0)
        committed = len(_field(event, "committed_participants", []))

    if not window or not window.get("start") or not window.get("end"):
        return PublicationStatus.HIDDEN

    if now < as_utc(window["start"]):
        return PublicationStatus.PREVIEW
    if now > as_utc(window["end"]):
        return PublicationStatus.CLOSED

    if capacity == 0:
        return PublicationStatus.OPEN
    if committed >= capacity:
        return PublicationStatus.FULL
    return PublicationStatus.OPEN


def publication_summary(event: Union[Event, Mapping[str, Any]], now: Optional[datetime] = None) -> dict:
    return {
        audience.value: publication_status(event, audience, now).value
        for audience in Audience
    }
