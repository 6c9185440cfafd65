from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Person(SQLModel, table=True):
    __tablename__ = "people"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    first_name: str
    middle_name: Optional[str] = None
    last_name: str = Field(index=True)
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    billing_address_id: Optional[UUID] = Field(default=None, foreign_key="addresses.id", ondelete="SET NULL")
    mailing_address_id: Optional[UUID] = Field(default=None, foreign_key="addresses.id", ondelete="SET NULL")
    physical_address_id: Optional[UUID] = Field(default=None, foreign_key="addresses.id", ondelete="SET NULL")
    notes: Optional[str] = None
    # may carry x/y/zoom crop-position query parameters
    photo_url: Optional[str] = None
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
    deleted_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
