from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class AreaAdmin(SQLModel, table=True):
    __tablename__ = "area_admins"
    __table_args__ = (UniqueConstraint("area_id", "person_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    area_id: UUID = Field(foreign_key="areas.id", ondelete="CASCADE", index=True)
    person_id: UUID = Field(foreign_key="people.id", ondelete="CASCADE", index=True)
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
