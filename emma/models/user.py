from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field


class EmmaUser(SQLModel, table=True):
    __tablename__ = "emma_users"  # This must match the Supabase table name

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth0_user: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    civicrm_user: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    drupal_user: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    person: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    other_auth0_users: List[Any] = Field(default_factory=list, sa_type=JSON)
    other_civicrm_users: List[Any] = Field(default_factory=list, sa_type=JSON)
    other_drupal_users: List[Any] = Field(default_factory=list, sa_type=JSON)
    other_people: List[Any] = Field(default_factory=list, sa_type=JSON)
    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    synchronized_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
