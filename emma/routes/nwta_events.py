from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.nwta_events import (
    NwtaEventCreate,
    NwtaEventUpdate,
    create_nwta_event,
    delete_nwta_event,
    get_nwta_event,
    list_nwta_events,
    update_nwta_event,
)

router = APIRouter(prefix="/api/nwta-events", tags=["NWTA Events"])


@router.get("")
async def get_nwta_events(
    active: Optional[str] = None,
    published: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    events = await list_nwta_events(session, active, published, search)
    return success_response(events, count=len(events))


@router.post("")
async def post_nwta_event(payload: NwtaEventCreate, session: AsyncSession = Depends(get_session)):
    event = await create_nwta_event(session, payload)
    return success_response(event, message="NWTA event created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/{event_id}")
async def get_one_nwta_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_nwta_event(session, event_id))


@router.put("/{event_id}")
async def put_nwta_event(event_id: UUID, payload: NwtaEventUpdate, session: AsyncSession = Depends(get_session)):
    event = await update_nwta_event(session, event_id, payload)
    return success_response(event, message="NWTA event updated successfully")


@router.delete("/{event_id}")
async def remove_nwta_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_nwta_event(session, event_id)
    return success_response({"id": deleted_id}, message="NWTA event deleted successfully")
