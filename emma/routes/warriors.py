from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.warriors import (
    WarriorCreate,
    WarriorUpdate,
    create_warrior,
    delete_warrior,
    get_warrior,
    list_warriors,
    update_warrior,
    warrior_stats,
)

router = APIRouter(prefix="/api/warriors", tags=["Warriors"])


@router.get("")
async def get_warriors(
    active: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
    community_id: Optional[UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    warriors = await list_warriors(session, active, status, search, area_id, community_id)
    return success_response(warriors, count=len(warriors))


@router.post("")
async def post_warrior(payload: WarriorCreate, session: AsyncSession = Depends(get_session)):
    warrior = await create_warrior(session, payload)
    return success_response(warrior, message="Warrior created successfully", status_code=201)


@router.get("/stats")
async def get_warrior_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await warrior_stats(session))


@router.get("/{warrior_id}")
async def get_warrior_by_id(warrior_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_warrior(session, warrior_id))


@router.put("/{warrior_id}")
async def put_warrior(warrior_id: UUID, payload: WarriorUpdate, session: AsyncSession = Depends(get_session)):
    warrior = await update_warrior(session, warrior_id, payload)
    return success_response(warrior, message="Warrior updated successfully")


@router.delete("/{warrior_id}")
async def remove_warrior(warrior_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_warrior(session, warrior_id)
    return success_response({"id": deleted_id}, message="Warrior deleted successfully")
