from typing import Any, Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Area
from emma.services.common import (
    OptionalId,
    apply_changes,
    archive,
    ensure_unique_code,
    get_or_404,
    parse_bool,
    search_clause,
)

LABEL = "Area"


class AreaCreate(SQLModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1, max_length=6)
    description: Optional[str] = None
    steward_id: OptionalId = None
    finance_coordinator_id: OptionalId = None
    geo_polygon: Optional[Dict[str, Any]] = None
    color: str = "#3B82F6"
    is_active: bool = True


class AreaUpdate(SQLModel):
    name: str = Field(default=None, min_length=1)
    code: str = Field(default=None, min_length=1, max_length=6)
    description: Optional[str] = None
    steward_id: OptionalId = None
    finance_coordinator_id: OptionalId = None
    geo_polygon: Optional[Dict[str, Any]] = None
    color: str = None
    is_active: bool = None


async def list_areas(
    session: AsyncSession, active: Optional[str] = None, search: Optional[str] = None
) -> List[Area]:
    statement = select(Area)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Area.is_active == is_active)
    clause = search_clause(search, Area.name, Area.code)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Area.created_at).desc()))
    return result.all()


async def get_area_or_404(session: AsyncSession, area_id: UUID) -> Area:
    return await get_or_404(session, Area, area_id, LABEL)


async def create_area(session: AsyncSession, payload: AreaCreate) -> Area:
    await ensure_unique_code(session, Area, payload.code, LABEL)
    area = Area(**payload.model_dump())
    session.add(area)
    await session.commit()
    await session.refresh(area)
    logger.info("Created area {} ({})", area.id, area.code)
    return area


async def update_area(session: AsyncSession, area_id: UUID, payload: AreaUpdate) -> Area:
    area = await get_area_or_404(session, area_id)
    changes = payload.model_dump(exclude_unset=True)
    await ensure_unique_code(session, Area, changes.get("code"), LABEL, exclude_id=area_id)
    apply_changes(area, changes)
    session.add(area)
    await session.commit()
    await session.refresh(area)
    logger.info("Updated area {}", area_id)
    return area


async def archive_area(session: AsyncSession, area_id: UUID) -> UUID:
    await archive(session, Area, area_id, LABEL)
    logger.info("Archived area {}", area_id)
    return area_id


async def set_image_url(session: AsyncSession, area: Area, image_url: Optional[str]) -> Area:
    apply_changes(area, {"image_url": image_url})
    session.add(area)
    await session.commit()
    await session.refresh(area)
    return area
