from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Venue
from emma.services.common import (
    IdString,
    OptionalEmail,
    OptionalId,
    OptionalUrl,
    apply_changes,
    get_or_404,
    parse_bool,
    search_clause,
)

LABEL = "Venue"


class VenueCreate(SQLModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    email: OptionalEmail = None
    phone: Optional[str] = None
    website: OptionalUrl = None
    timezone: str = Field(default="America/New_York", max_length=50)
    mailing_address_id: OptionalId = None
    physical_address_id: OptionalId = None
    event_types: List[IdString] = []
    primary_contact_id: OptionalId = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    area_id: OptionalId = None
    community_id: OptionalId = None
    is_nudity: bool = False
    nudity_note: Optional[str] = None
    is_rejected: bool = False
    rejected_note: Optional[str] = None
    is_private_residence: bool = False
    is_active: bool = True


class VenueUpdate(SQLModel):
    name: str = Field(default=None, min_length=1)
    description: Optional[str] = None
    email: OptionalEmail = None
    phone: Optional[str] = None
    website: OptionalUrl = None
    timezone: str = Field(default=None, max_length=50)
    mailing_address_id: OptionalId = None
    physical_address_id: OptionalId = None
    event_types: List[IdString] = None
    primary_contact_id: OptionalId = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    area_id: OptionalId = None
    community_id: OptionalId = None
    is_nudity: bool = None
    nudity_note: Optional[str] = None
    is_rejected: bool = None
    rejected_note: Optional[str] = None
    is_private_residence: bool = None
    is_active: bool = None


async def list_venues(
    session: AsyncSession,
    active: Optional[str] = None,
    rejected: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
    community_id: Optional[UUID] = None,
) -> List[Venue]:
    statement = select(Venue)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Venue.is_active == is_active)
    is_rejected = parse_bool(rejected)
    if is_rejected is not None:
        statement = statement.where(Venue.is_rejected == is_rejected)
    if area_id:
        statement = statement.where(Venue.area_id == area_id)
    if community_id:
        statement = statement.where(Venue.community_id == community_id)
    clause = search_clause(search, Venue.name, Venue.email)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Venue.created_at).desc()))
    return result.all()


async def get_venue_or_404(session: AsyncSession, venue_id: UUID) -> Venue:
    return await get_or_404(session, Venue, venue_id, LABEL)


async def create_venue(session: AsyncSession, payload: VenueCreate) -> Venue:
    venue = Venue(**payload.model_dump())
    session.add(venue)
    await session.commit()
    await session.refresh(venue)
    logger.info("Created venue {} ({})", venue.id, venue.name)
    return venue


async def update_venue(session: AsyncSession, venue_id: UUID, payload: VenueUpdate) -> Venue:
    venue = await get_venue_or_404(session, venue_id)
    apply_changes(venue, payload.model_dump(exclude_unset=True))
    session.add(venue)
    await session.commit()
    await session.refresh(venue)
    logger.info("Updated venue {}", venue_id)
    return venue


async def delete_venue(session: AsyncSession, venue_id: UUID) -> UUID:
    venue = await get_venue_or_404(session, venue_id)
    await session.delete(venue)
    await session.commit()
    logger.info("Deleted venue {}", venue_id)
    return venue_id
