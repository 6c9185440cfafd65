from enum import Enum
from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import col
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import FGroup, Group
from emma.services.common import IdString, OptionalId, TimeRange, activity_stats, parse_bool
from emma.services.groups import (
    GroupCreate,
    GroupUpdate,
    create_with_group,
    get_with_group_or_404,
    group_join,
    merge_group,
    name_clause,
    update_with_group,
)

LABEL = "Facilitation group"


class FGroupType(str, Enum):
    MENS = "Men's"
    MIXED_GENDER = "Mixed Gender"
    OPEN_MENS = "Open Men's"
    CLOSED_MENS = "Closed Men's"


class FGroupCreate(GroupCreate):
    model_config = {"use_enum_values": True}

    is_accepting_new_members: bool = True
    is_publicly_listed: bool = True
    group_type: FGroupType
    is_accepting_new_facilitators: bool = True
    facilitators: List[IdString] = []
    is_accepting_initiated_visitors: bool = True
    is_accepting_uninitiated_visitors: bool = False
    is_requiring_contact_before_visiting: bool = True
    schedule_events: List[TimeRange] = []
    schedule_description: Optional[str] = None
    area_id: OptionalId = None
    community_id: OptionalId = None


class FGroupUpdate(GroupUpdate):
    model_config = {"use_enum_values": True}

    group_type: FGroupType = None
    is_accepting_new_facilitators: bool = None
    facilitators: List[IdString] = None
    is_accepting_initiated_visitors: bool = None
    is_accepting_uninitiated_visitors: bool = None
    is_requiring_contact_before_visiting: bool = None
    schedule_events: List[TimeRange] = None
    schedule_description: Optional[str] = None
    area_id: OptionalId = None
    community_id: OptionalId = None


async def list_f_groups(
    session: AsyncSession,
    active: Optional[str] = None,
    group_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[dict]:
    statement = group_join(FGroup)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(FGroup.is_active == is_active)
    if group_type:
        statement = statement.where(FGroup.group_type == group_type)
    clause = name_clause(None, search)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Group.created_at).desc()))
    return [merge_group(group, f_group) for group, f_group in result.all()]


async def get_f_group(session: AsyncSession, group_id: UUID) -> dict:
    group, f_group = await get_with_group_or_404(session, FGroup, group_id, LABEL)
    return merge_group(group, f_group)


async def create_f_group(session: AsyncSession, payload: FGroupCreate) -> dict:
    return await create_with_group(session, FGroup, payload.model_dump())


async def update_f_group(session: AsyncSession, group_id: UUID, payload: FGroupUpdate) -> dict:
    return await update_with_group(session, FGroup, group_id, payload.model_dump(exclude_unset=True), LABEL)


async def delete_f_group(session: AsyncSession, group_id: UUID) -> UUID:
    """Removes the facilitation group row and then its base group."""
    group, f_group = await get_with_group_or_404(session, FGroup, group_id, LABEL)
    await session.delete(f_group)
    await session.flush()
    await session.delete(group)
    await session.commit()
    logger.info("Deleted facilitation group {}", group_id)
    return group_id


async def f_group_stats(session: AsyncSession) -> dict:
    return await activity_stats(session, FGroup)
