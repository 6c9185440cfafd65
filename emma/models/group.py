from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Group(SQLModel, table=True):
    __tablename__ = "groups"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: str
    url: Optional[str] = None
    members: List[str] = Field(default_factory=list, sa_type=JSON)
    is_accepting_new_members: bool = False
    membership_criteria: Optional[str] = None
    venue_id: Optional[UUID] = Field(default=None, foreign_key="venues.id", ondelete="SET NULL")
    genders: Optional[str] = None
    is_publicly_listed: bool = False
    public_contact_id: Optional[UUID] = Field(default=None, foreign_key="people.id", ondelete="SET NULL")
    primary_contact_id: Optional[UUID] = Field(default=None, foreign_key="people.id", ondelete="SET NULL")
    photo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
    # set when the group is soft-deleted
    deleted_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), index=True)


class IGroup(SQLModel, table=True):
    __tablename__ = "i_groups"

    id: UUID = Field(primary_key=True, foreign_key="groups.id", ondelete="CASCADE")
    log_id: Optional[UUID] = Field(default=None, index=True)
    is_accepting_initiated_visitors: bool = True
    is_accepting_uninitiated_visitors: bool = False
    is_requiring_contact_before_visiting: bool = True
    # list of {"start": iso, "end": iso}
    schedule_events: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    schedule_description: Optional[str] = None
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id", ondelete="SET NULL")
    community_id: Optional[UUID] = Field(default=None, foreign_key="communities.id", ondelete="SET NULL")
    contact_email: Optional[str] = None
    status: Optional[str] = Field(default=None, max_length=50)
    affiliation: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class FGroup(SQLModel, table=True):
    __tablename__ = "f_groups"

    id: UUID = Field(primary_key=True, foreign_key="groups.id", ondelete="CASCADE")
    group_type: Optional[str] = Field(default=None, index=True)
    is_accepting_new_facilitators: bool = True
    facilitators: List[str] = Field(default_factory=list, sa_type=JSON)
    is_accepting_initiated_visitors: bool = True
    is_accepting_uninitiated_visitors: bool = False
    is_requiring_contact_before_visiting: bool = True
    schedule_events: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    schedule_description: Optional[str] = None
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id", ondelete="SET NULL")
    community_id: Optional[UUID] = Field(default=None, foreign_key="communities.id", ondelete="SET NULL")
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
