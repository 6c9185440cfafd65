from datetime import date, datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Warrior(SQLModel, table=True):
    __tablename__ = "warriors"

    id: UUID = Field(primary_key=True, foreign_key="people.id", ondelete="CASCADE")
    log_id: Optional[UUID] = Field(default_factory=uuid4, nullable=True)
    initiation_id: Optional[UUID] = Field(
        default=None, foreign_key="events.id", ondelete="SET NULL"
    )
    initiation_on: Optional[date] = None
    initiation_text: Optional[str] = None
    status: Optional[str] = Field(default="Initiated", max_length=50)
    training_events: List[str] = Field(default_factory=list, sa_type=JSON)
    staffed_events: List[str] = Field(default_factory=list, sa_type=JSON)
    lead_events: List[str] = Field(default_factory=list, sa_type=JSON)
    mos_events: List[str] = Field(default_factory=list, sa_type=JSON)
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id")
    community_id: Optional[UUID] = Field(default=None, foreign_key="communities.id")
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
