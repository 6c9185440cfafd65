from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Prospect(SQLModel, table=True):
    __tablename__ = "prospects"

    id: UUID = Field(primary_key=True, foreign_key="people.id", ondelete="CASCADE")
    log_id: Optional[UUID] = None
    balked_events: List[str] = Field(default_factory=list, sa_type=JSON)
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
