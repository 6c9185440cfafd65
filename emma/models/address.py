from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Address(SQLModel, table=True):
    __tablename__ = "addresses"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    address_1: str
    address_2: Optional[str] = None
    city: str = Field(index=True)
    state: str = Field(index=True)
    country: str = "United States"
    postal_code: str = Field(index=True)
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
    deleted_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
