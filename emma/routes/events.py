from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.events import (
    EventCreate,
    EventUpdate,
    archive_event,
    create_event,
    event_stats,
    get_event_or_404,
    list_events,
    serialize_events,
    update_event,
)

router = APIRouter(prefix="/api/events", tags=["Events"])


async def _serialize_one(session: AsyncSession, event) -> dict:
    records = await serialize_events(session, [event])
    return records[0]


@router.get("")
async def get_events(
    active: Optional[str] = None,
    published: Optional[str] = None,
    search: Optional[str] = None,
    nwta: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    events = await list_events(session, active, published, search, nwta)
    records = await serialize_events(session, events)
    return success_response(records, count=len(records))


@router.post("")
async def post_event(payload: EventCreate, session: AsyncSession = Depends(get_session)):
    event = await create_event(session, payload)
    return success_response(
        await _serialize_one(session, event),
        message="Event created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/stats")
async def get_event_stats(nwta: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    return success_response(await event_stats(session, nwta))


@router.get("/{event_id}")
async def get_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    event = await get_event_or_404(session, event_id)
    return success_response(await _serialize_one(session, event))


@router.put("/{event_id}")
async def put_event(event_id: UUID, payload: EventUpdate, session: AsyncSession = Depends(get_session)):
    event = await update_event(session, event_id, payload)
    return success_response(await _serialize_one(session, event), message="Event updated successfully")


@router.delete("/{event_id}")
async def remove_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    archived_id = await archive_event(session, event_id)
    return success_response({"id": archived_id}, message="Event archived successfully")
