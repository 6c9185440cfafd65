from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class NwtaEvent(SQLModel, table=True):
    """NWTA-only details of an event; shares the event's id."""

    __tablename__ = "nwta_events"

    id: UUID = Field(primary_key=True, foreign_key="events.id", ondelete="CASCADE")
    rookies: List[str] = Field(default_factory=list, sa_type=JSON)
    elders: List[str] = Field(default_factory=list, sa_type=JSON)
    mos: List[str] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class NwtaRoleType(SQLModel, table=True):
    __tablename__ = "nwta_role_types"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    summary: Optional[str] = None
    needs_experience: Optional[str] = None
    experience_level: int = 0
    work_points: int = 0
    preparation_points: int = 0
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class NwtaRole(SQLModel, table=True):
    __tablename__ = "nwta_roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    summary: Optional[str] = None
    nwta_event_id: Optional[UUID] = Field(
        default=None, foreign_key="events.id", ondelete="CASCADE", index=True
    )
    role_type_id: Optional[UUID] = Field(
        default=None, foreign_key="nwta_role_types.id", ondelete="SET NULL"
    )
    lead_warrior_id: Optional[UUID] = Field(
        default=None, foreign_key="warriors.id", ondelete="SET NULL"
    )
    warriors: List[str] = Field(default_factory=list, sa_type=JSON)
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
