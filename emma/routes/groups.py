from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.groups import (
    GroupCreate,
    GroupUpdate,
    create_group,
    delete_group,
    get_group_or_404,
    group_stats,
    list_groups,
    update_group,
)

router = APIRouter(prefix="/api/groups", tags=["Groups"])


@router.get("")
async def get_groups(
    active: Optional[str] = None,
    search: Optional[str] = None,
    publicly_listed: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    groups = await list_groups(session, active, search, publicly_listed)
    return success_response(groups, count=len(groups))


@router.post("")
async def post_group(payload: GroupCreate, session: AsyncSession = Depends(get_session)):
    group = await create_group(session, payload)
    return success_response(group, message="Group created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/stats")
async def get_group_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await group_stats(session))


@router.get("/{group_id}")
async def get_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_group_or_404(session, group_id))


@router.put("/{group_id}")
async def put_group(group_id: UUID, payload: GroupUpdate, session: AsyncSession = Depends(get_session)):
    group = await update_group(session, group_id, payload)
    return success_response(group, message="Group updated successfully")


@router.delete("/{group_id}")
async def remove_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_group(session, group_id)
    return success_response({"id": deleted_id}, message="Group deleted successfully")
