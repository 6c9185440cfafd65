from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.geo import parse_radius_miles, pick_origin, within_radius
from emma.services.venues import (
    VenueCreate,
    VenueUpdate,
    create_venue,
    delete_venue,
    get_venue_or_404,
    list_venues,
    update_venue,
)

router = APIRouter(prefix="/api/venues", tags=["Venues"])


@router.get("")
async def get_venues(
    active: Optional[str] = None,
    rejected: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
    community_id: Optional[UUID] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    venues = await list_venues(session, active, rejected, search, area_id, community_id)
    origin_lat = pick_origin(lat, latitude)
    origin_lng = pick_origin(lng, longitude)
    if origin_lat is not None and origin_lng is not None:
        records = [venue.model_dump() for venue in venues]
        nearby = within_radius(records, origin_lat, origin_lng, parse_radius_miles(radius))
        return success_response(nearby, count=len(nearby))
    return success_response(venues, count=len(venues))


@router.post("")
async def post_venue(payload: VenueCreate, session: AsyncSession = Depends(get_session)):
    venue = await create_venue(session, payload)
    return success_response(venue, message="Venue created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/{venue_id}")
async def get_venue(venue_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_venue_or_404(session, venue_id))


@router.put("/{venue_id}")
async def put_venue(venue_id: UUID, payload: VenueUpdate, session: AsyncSession = Depends(get_session)):
    venue = await update_venue(session, venue_id, payload)
    return success_response(venue, message="Venue updated successfully")


@router.delete("/{venue_id}")
async def remove_venue(venue_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_venue(session, venue_id)
    return success_response({"id": deleted_id}, message="Venue deleted successfully")
