from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.geo import parse_radius_miles, pick_origin
from emma.services.i_groups import (
    IGroupCreate,
    IGroupFilters,
    IGroupUpdate,
    create_i_group,
    delete_i_group,
    get_i_group,
    i_group_stats,
    list_i_groups,
    update_i_group,
)

router = APIRouter(prefix="/api/i-groups", tags=["I-Groups"])


@router.get("")
async def get_i_groups(
    filters: IGroupFilters = Depends(),
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    rad: Optional[str] = None,
    radius: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    i_groups = await list_i_groups(
        session,
        filters,
        pick_origin(lat, latitude),
        pick_origin(lon, longitude),
        parse_radius_miles(rad if rad is not None else radius),
    )
    return success_response(i_groups, count=len(i_groups))


@router.post("")
async def post_i_group(payload: IGroupCreate, session: AsyncSession = Depends(get_session)):
    i_group = await create_i_group(session, payload)
    return success_response(
        i_group, message="Integration group created successfully", status_code=status.HTTP_201_CREATED
    )


@router.get("/stats")
async def get_i_group_stats(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    rad: Optional[str] = None,
    radius: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    stats = await i_group_stats(
        session,
        pick_origin(lat, latitude),
        pick_origin(lon, longitude),
        parse_radius_miles(rad if rad is not None else radius),
    )
    return success_response(stats)


@router.get("/{group_id}")
async def get_one_i_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_i_group(session, group_id))


@router.put("/{group_id}")
async def put_i_group(group_id: UUID, payload: IGroupUpdate, session: AsyncSession = Depends(get_session)):
    i_group = await update_i_group(session, group_id, payload)
    return success_response(i_group, message="Integration group updated successfully")


@router.delete("/{group_id}")
async def remove_i_group(group_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_i_group(session, group_id)
    return success_response({"id": deleted_id}, message="Integration group deleted successfully")
