from typing import List, Optional
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Prospect
from emma.services.common import IdString, OptionalId, activity_stats
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

LABEL = "Prospect"


class ProspectCreate(PersonCreate):
    log_id: OptionalId = None
    balked_events: List[IdString] = []


class ProspectUpdate(PersonUpdate):
    log_id: OptionalId = None
    balked_events: List[IdString] = None


async def list_prospects(
    session: AsyncSession, active: Optional[str] = None, search: Optional[str] = None
) -> List[dict]:
    return await list_with_person(session, Prospect, active=active, search=search)


async def get_prospect(session: AsyncSession, prospect_id: UUID) -> dict:
    person, prospect = await get_with_person_or_404(session, Prospect, prospect_id, LABEL)
    return merge_person(person, prospect)


async def create_prospect(session: AsyncSession, payload: ProspectCreate) -> dict:
    return await create_with_person(session, Prospect, payload.model_dump(exclude_unset=True))


async def update_prospect(session: AsyncSession, prospect_id: UUID, payload: ProspectUpdate) -> dict:
    return await update_with_person(
        session, Prospect, prospect_id, payload.model_dump(exclude_unset=True), LABEL
    )


async def delete_prospect(session: AsyncSession, prospect_id: UUID) -> UUID:
    return await delete_with_person(session, Prospect, prospect_id, LABEL)


async def prospect_stats(session: AsyncSession) -> dict:
    return await activity_stats(session, Prospect)
