from typing import List, Optional
from uuid import UUID

from sqlmodel import Field
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Registrant
from emma.services.common import OptionalId, activity_stats
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

LABEL = "Registrant"
EVENT_NOT_FOUND = "Event not found"


class RegistrantCreate(PersonCreate):
    event_id: UUID
    log_id: OptionalId = None
    payment_plan: OptionalId = None
    transaction_log: OptionalId = None


class RegistrantUpdate(PersonUpdate):
    event_id: UUID = Field(default=None)
    log_id: OptionalId = None
    payment_plan: OptionalId = None
    transaction_log: OptionalId = None


async def list_registrants(
    session: AsyncSession,
    active: Optional[str] = None,
    event_id: Optional[UUID] = None,
    search: Optional[str] = None,
) -> List[dict]:
    conditions = [Registrant.event_id == event_id] if event_id else []
    return await list_with_person(session, Registrant, *conditions, active=active, search=search)


async def get_registrant(session: AsyncSession, registrant_id: UUID) -> dict:
    person, registrant = await get_with_person_or_404(session, Registrant, registrant_id, LABEL)
    return merge_person(person, registrant)


async def create_registrant(session: AsyncSession, payload: RegistrantCreate) -> dict:
    await ensure_event_exists(session, payload.event_id, EVENT_NOT_FOUND)
    return await create_with_person(session, Registrant, payload.model_dump(exclude_unset=True))


async def update_registrant(session: AsyncSession, registrant_id: UUID, payload: RegistrantUpdate) -> dict:
    await get_with_person_or_404(session, Registrant, registrant_id, LABEL)
    changes = payload.model_dump(exclude_unset=True)
    await ensure_event_exists(session, changes.get("event_id"), EVENT_NOT_FOUND)
    return await update_with_person(session, Registrant, registrant_id, changes, LABEL)


async def delete_registrant(session: AsyncSession, registrant_id: UUID) -> UUID:
    return await delete_with_person(session, Registrant, registrant_id, LABEL)


async def registrant_stats(session: AsyncSession) -> dict:
    return await activity_stats(session, Registrant)
