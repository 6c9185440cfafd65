from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.registrants import (
    RegistrantCreate,
    RegistrantUpdate,
    create_registrant,
    delete_registrant,
    get_registrant,
    list_registrants,
    registrant_stats,
    update_registrant,
)

router = APIRouter(prefix="/api/registrants", tags=["Registrants"])


@router.get("")
async def get_registrants(
    active: Optional[str] = None,
    event_id: Optional[UUID] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    registrants = await list_registrants(session, active, event_id, search)
    return success_response(registrants, count=len(registrants))


@router.post("")
async def post_registrant(payload: RegistrantCreate, session: AsyncSession = Depends(get_session)):
    registrant = await create_registrant(session, payload)
    return success_response(
        registrant, message="Registrant created successfully", status_code=status.HTTP_201_CREATED
    )


@router.get("/stats")
async def get_registrant_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await registrant_stats(session))


@router.get("/{registrant_id}")
async def get_registrant_by_id(registrant_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_registrant(session, registrant_id))


@router.put("/{registrant_id}")
async def put_registrant(
    registrant_id: UUID, payload: RegistrantUpdate, session: AsyncSession = Depends(get_session)
):
    registrant = await update_registrant(session, registrant_id, payload)
    return success_response(registrant, message="Registrant updated successfully")


@router.delete("/{registrant_id}")
async def remove_registrant(registrant_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_registrant(session, registrant_id)
    return success_response({"id": deleted_id}, message="Registrant deleted successfully")
