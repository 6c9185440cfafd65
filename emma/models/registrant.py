from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Registrant(SQLModel, table=True):
    __tablename__ = "registrants"

    id: UUID = Field(primary_key=True, foreign_key="people.id", ondelete="CASCADE")
    event_id: UUID = Field(foreign_key="events.id", ondelete="CASCADE", index=True)
    log_id: Optional[UUID] = None
    payment_plan: Optional[UUID] = None
    transaction_log: Optional[UUID] = None
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
