from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class Community(SQLModel, table=True):
    __tablename__ = "communities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    code: str = Field(max_length=6, unique=True)
    description: Optional[str] = None
    area_id: Optional[UUID] = Field(default=None, foreign_key="areas.id", ondelete="SET NULL")
    coordinator_id: Optional[UUID] = Field(default=None, foreign_key="people.id", ondelete="SET NULL")
    geo_json: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    image_url: Optional[str] = None
    color: Optional[str] = "#10B981"
    is_active: bool = True
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
