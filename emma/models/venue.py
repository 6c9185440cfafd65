from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Venue(SQLModel, table=True):
    __tablename__ = "venues"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    timezone: Optional[str] = Field(default="America/New_York", max_length=50)
    mailing_address_id: Optional[UUID] = Field(default=None, foreign_key="addresses.id", ondelete="SET NULL")
    physical_address_id: Optional[UUID] = Field(default=None, foreign_key="addresses.id", ondelete="SET NULL")
    event_types: List[str] = Field(default_factory=list, sa_type=JSON)
    primary_contact_id: Optional[UUID] = Field(
        default=None, foreign_key="people.id", ondelete="SET NULL"
    )
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id", ondelete="SET NULL")
    community_id: Optional[UUID] = Field(
        default=None, foreign_key="communities.id", ondelete="SET NULL"
    )
    is_nudity: bool = False
    nudity_note: Optional[str] = None
    is_rejected: bool = False
    rejected_note: Optional[str] = None
    is_private_residence: bool = False
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
