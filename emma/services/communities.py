from typing import Any, Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Community
from emma.services.common import (
    OptionalId,
    apply_changes,
    archive,
    ensure_unique_code,
    get_or_404,
    parse_bool,
    search_clause,
)

LABEL = "Community"


class CommunityCreate(SQLModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1, max_length=6)
    description: Optional[str] = None
    area_id: OptionalId = None
    coordinator_id: OptionalId = None
    geo_json: Optional[Dict[str, Any]] = None
    color: str = "#10B981"
    is_active: bool = True


class CommunityUpdate(SQLModel):
    name: str = Field(default=None, min_length=1)
    code: str = Field(default=None, min_length=1, max_length=6)
    description: Optional[str] = None
    area_id: OptionalId = None
    coordinator_id: OptionalId = None
    geo_json: Optional[Dict[str, Any]] = None
    color: str = None
    is_active: bool = None


async def list_communities(
    session: AsyncSession,
    active: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
) -> List[Community]:
    statement = select(Community)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Community.is_active == is_active)
    if area_id:
        statement = statement.where(Community.area_id == area_id)
    clause = search_clause(search, Community.name, Community.code)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Community.created_at).desc()))
    return result.all()


async def get_community_or_404(session: AsyncSession, community_id: UUID) -> Community:
    return await get_or_404(session, Community, community_id, LABEL)


async def create_community(session: AsyncSession, payload: CommunityCreate) -> Community:
    await ensure_unique_code(session, Community, payload.code, LABEL)
    community = Community(**payload.model_dump())
    session.add(community)
    await session.commit()
    await session.refresh(community)
    logger.info("Created community {} ({})", community.id, community.code)
    return community


async def update_community(session: AsyncSession, community_id: UUID, payload: CommunityUpdate) -> Community:
    community = await get_community_or_404(session, community_id)
    changes = payload.model_dump(exclude_unset=True)
    await ensure_unique_code(session, Community, changes.get("code"), LABEL, exclude_id=community_id)
    apply_changes(community, changes)
    session.add(community)
    await session.commit()
    await session.refresh(community)
    logger.info("Updated community {}", community_id)
    return community


async def archive_community(session: AsyncSession, community_id: UUID) -> UUID:
    await archive(session, Community, community_id, LABEL)
    logger.info("Archived community {}", community_id)
    return community_id


async def set_image_url(session: AsyncSession, community: Community, image_url: Optional[str]) -> Community:
    apply_changes(community, {"image_url": image_url})
    session.add(community)
    await session.commit()
    await session.refresh(community)
    return community
