from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: Optional[str] = None
    event_type_id: Optional[UUID] = Field(default=None, foreign_key="event_types.id", index=True)
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id")
    community_id: Optional[UUID] = Field(default=None, foreign_key="communities.id")
    venue_id: Optional[UUID] = Field(default=None, foreign_key="venues.id")
    transaction_log_id: UUID = Field(default_factory=uuid4, index=True)

    # costs are stored in cents
    staff_cost: int = 0
    staff_capacity: int = 0
    potential_staff: List[str] = Field(default_factory=list, sa_type=JSON)
    committed_staff: List[str] = Field(default_factory=list, sa_type=JSON)
    alternate_staff: List[str] = Field(default_factory=list, sa_type=JSON)
    participant_cost: int = 0
    participant_capacity: int = 0
    potential_participants: List[str] = Field(default_factory=list, sa_type=JSON)
    committed_participants: List[str] = Field(default_factory=list, sa_type=JSON)
    waitlist_participants: List[str] = Field(default_factory=list, sa_type=JSON)

    primary_leader_id: Optional[UUID] = Field(default=None, foreign_key="people.id")
    leaders: List[str] = Field(default_factory=list, sa_type=JSON)

    # lists of {"start": iso, "end": iso}
    participant_schedule: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    staff_schedule: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    participant_published_time: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    staff_published_time: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    start_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    end_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    is_published: bool = False
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
