from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Field, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Warrior
from emma.services.common import IdString, OptionalId, activity_stats
from emma.services.events import ensure_event_exists
from emma.services.people import (
    PersonCreate,
    PersonUpdate,
    create_with_person,
    delete_with_person,
    get_with_person_or_404,
    list_with_person,
    merge_person,
    update_with_person,
)

LABEL = "Warrior"
INITIATION_NOT_FOUND = "Initiation event not found"


class WarriorCreate(PersonCreate):
    log_id: OptionalId = None
    initiation_id: OptionalId = None
    initiation_on: Optional[date] = None
    initiation_text: Optional[str] = None
    status: str = Field(default="Initiated", min_length=1, max_length=50)
    training_events: List[IdString] = []
    staffed_events: List[IdString] = []
    lead_events: List[IdString] = []
    mos_events: List[IdString] = []
    area_id: OptionalId = None
    community_id: OptionalId = None


class WarriorUpdate(PersonUpdate):
    log_id: OptionalId = None
    initiation_id: OptionalId = None
    initiation_on: Optional[date] = None
    initiation_text: Optional[str] = None
    status: str = Field(default=None, min_length=1, max_length=50)
    training_events: List[IdString] = None
    staffed_events: List[IdString] = None
    lead_events: List[IdString] = None
    mos_events: List[IdString] = None
    area_id: OptionalId = None
    community_id: OptionalId = None


async def list_warriors(
    session: AsyncSession,
    active: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
    community_id: Optional[UUID] = None,
) -> List[dict]:
    conditions = []
    if status:
        conditions.append(Warrior.status == status)
    if area_id:
        conditions.append(Warrior.area_id == area_id)
    if community_id:
        conditions.append(Warrior.community_id == community_id)
    return await list_with_person(session, Warrior, *conditions, active=active, search=search)


async def get_warrior(session: AsyncSession, warrior_id: UUID) -> dict:
    person, warrior = await get_with_person_or_404(session, Warrior, warrior_id, LABEL)
    return merge_person(person, warrior)


async def create_warrior(session: AsyncSession, payload: WarriorCreate) -> dict:
    await ensure_event_exists(session, payload.initiation_id, INITIATION_NOT_FOUND)
    return await create_with_person(session, Warrior, payload.model_dump(exclude_unset=True))


async def update_warrior(session: AsyncSession, warrior_id: UUID, payload: WarriorUpdate) -> dict:
    await get_with_person_or_404(session, Warrior, warrior_id, LABEL)
    changes = payload.model_dump(exclude_unset=True)
    await ensure_event_exists(session, changes.get("initiation_id"), INITIATION_NOT_FOUND)
    return await update_with_person(session, Warrior, warrior_id, changes, LABEL)


async def delete_warrior(session: AsyncSession, warrior_id: UUID) -> UUID:
    return await delete_with_person(session, Warrior, warrior_id, LABEL)


async def warrior_stats(session: AsyncSession) -> dict:
    stats = await activity_stats(session, Warrior)
    result = await session.exec(select(Warrior.status, func.count()).group_by(Warrior.status))
    stats["by_status"] = {status or "Unknown": count for status, count in result.all()}
    return stats
