from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_field():
    return Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
