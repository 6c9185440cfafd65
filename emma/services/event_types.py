from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import EventType
from emma.services.common import apply_changes, ensure_unique_code, get_or_404, parse_bool

LABEL = "Event type"


class EventTypeCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=6)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=7)
    icon: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = True


class EventTypeUpdate(SQLModel):
    name: str = Field(default=None, min_length=1, max_length=255)
    code: str = Field(default=None, min_length=1, max_length=6)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=7)
    icon: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = None


async def list_event_types(session: AsyncSession, active: Optional[str] = None) -> List[EventType]:
    statement = select(EventType)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(EventType.is_active == is_active)
    result = await session.exec(statement.order_by(col(EventType.created_at).desc()))
    return result.all()


async def get_event_type_or_404(session: AsyncSession, event_type_id: UUID) -> EventType:
    return await get_or_404(session, EventType, event_type_id, LABEL)


async def create_event_type(session: AsyncSession, payload: EventTypeCreate) -> EventType:
    await ensure_unique_code(session, EventType, payload.code, LABEL)
    event_type = EventType(**payload.model_dump())
    session.add(event_type)
    await session.commit()
    await session.refresh(event_type)
    logger.info("Created event type {} ({})", event_type.id, event_type.code)
    return event_type


async def update_event_type(session: AsyncSession, event_type_id: UUID, payload: EventTypeUpdate) -> EventType:
    event_type = await get_event_type_or_404(session, event_type_id)
    changes = payload.model_dump(exclude_unset=True)
    await ensure_unique_code(session, EventType, changes.get("code"), LABEL, exclude_id=event_type_id)
    apply_changes(event_type, changes)
    session.add(event_type)
    await session.commit()
    await session.refresh(event_type)
    logger.info("Updated event type {}", event_type_id)
    return event_type


async def delete_event_type(session: AsyncSession, event_type_id: UUID) -> UUID:
    event_type = await get_event_type_or_404(session, event_type_id)
    await session.delete(event_type)
    await session.commit()
    logger.info("Deleted event type {}", event_type_id)
    return event_type_id
