from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.prospects import (
    ProspectCreate,
    ProspectUpdate,
    create_prospect,
    delete_prospect,
    get_prospect,
    list_prospects,
    prospect_stats,
    update_prospect,
)

router = APIRouter(prefix="/api/prospects", tags=["Prospects"])


@router.get("")
async def get_prospects(
    active: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    prospects = await list_prospects(session, active, search)
    return success_response(prospects, count=len(prospects))


@router.post("")
async def post_prospect(payload: ProspectCreate, session: AsyncSession = Depends(get_session)):
    prospect = await create_prospect(session, payload)
    return success_response(prospect, message="Prospect created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/stats")
async def get_prospect_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await prospect_stats(session))


@router.get("/{prospect_id}")
async def get_prospect_by_id(prospect_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_prospect(session, prospect_id))


@router.put("/{prospect_id}")
async def put_prospect(prospect_id: UUID, payload: ProspectUpdate, session: AsyncSession = Depends(get_session)):
    prospect = await update_prospect(session, prospect_id, payload)
    return success_response(prospect, message="Prospect updated successfully")


@router.delete("/{prospect_id}")
async def remove_prospect(prospect_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_prospect(session, prospect_id)
    return success_response({"id": deleted_id}, message="Prospect deleted successfully")
