from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.f_groups import (
    FGroupCreate,
    FGroupUpdate,
    create_f_group,
    delete_f_group,
    f_group_stats,
    get_f_group,
    list_f_groups,
    update_f_group,
)

router = APIRouter(prefix="/api/f-groups", tags=["F-Groups"])


@router.get("")
async def get_f_groups(
    active: Optional[str] = None,
    group_type: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    f_groups = await list_f_groups(session, active, group_type, search)
    return success_response(f_groups, count=len(f_groups))


@router.post("")
async def post_f_group(payload: FGroupCreate, session: AsyncSession = Depends(get_session)):
    f_group = await create_f_group(session, payload)
    return success_response(
        f_group, message="Facilitation group created successfully", status_code=status.HTTP_201_CREATED
    )


@router.get("/stats")
async def get_f_group_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await f_group_stats(session))


@router.get("/{group_id}")
async def get_one_f_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_f_group(session, group_id))


@router.put("/{group_id}")
async def put_f_group(group_id: UUID, payload: FGroupUpdate, session: AsyncSession = Depends(get_session)):
    f_group = await update_f_group(session, group_id, payload)
    return success_response(f_group, message="Facilitation group updated successfully")


@router.delete("/{group_id}")
async def remove_f_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_f_group(session, group_id)
    return success_response({"id": deleted_id}, message="Facilitation group deleted successfully")
