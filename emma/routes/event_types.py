from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.event_types import (
    EventTypeCreate,
    EventTypeUpdate,
    create_event_type,
    delete_event_type,
    get_event_type_or_404,
    list_event_types,
    update_event_type,
)

router = APIRouter(prefix="/api/event-types", tags=["Event Types"])


@router.get("")
async def get_event_types(active: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    event_types = await list_event_types(session, active)
    return success_response(event_types, count=len(event_types))


@router.post("")
async def post_event_type(payload: EventTypeCreate, session: AsyncSession = Depends(get_session)):
    event_type = await create_event_type(session, payload)
    return success_response(
        event_type, message="Event type created successfully", status_code=status.HTTP_201_CREATED
    )


@router.get("/{event_type_id}")
async def get_event_type(event_type_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_event_type_or_404(session, event_type_id))


@router.put("/{event_type_id}")
async def put_event_type(
    event_type_id: UUID, payload: EventTypeUpdate, session: AsyncSession = Depends(get_session)
):
    event_type = await update_event_type(session, event_type_id, payload)
    return success_response(event_type, message="Event type updated successfully")


@router.delete("/{event_type_id}")
async def remove_event_type(event_type_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_event_type(session, event_type_id)
    return success_response({"id": deleted_id}, message="Event type deleted successfully")
