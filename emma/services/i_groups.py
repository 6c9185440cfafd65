import re
from datetime import datetime
from datetime import time as TimeOfDay
from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import func
from sqlmodel import Field, SQLModel, col
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Address, Area, Community, Group, IGroup, Person, Venue, utcnow
from emma.services.common import (
    OptionalEmail,
    OptionalId,
    TimeRange,
    activity_stats,
    apply_changes,
    count_rows,
    parse_bool,
    rows_by_id,
)
from emma.services.geo import DEFAULT_RADIUS_MILES, within_radius
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
from emma.services.publication import as_utc

LABEL = "Integration group"

# Sunday is 0, matching the front end's day numbering
DAY_NUMBERS = {
    "sun": 0, "sunday": 0,
    "mon": 1, "monday": 1,
    "tue": 2, "tuesday": 2,
    "wed": 3, "wednesday": 3,
    "thu": 4, "thursday": 4,
    "fri": 5, "friday": 5,
    "sat": 6, "saturday": 6,
}
TIME_WINDOW_MINUTES = 60


class IGroupCreate(GroupCreate):
    is_accepting_new_members: bool = True
    is_publicly_listed: bool = True
    log_id: OptionalId = None
    is_accepting_initiated_visitors: bool = True
    is_accepting_uninitiated_visitors: bool = False
    is_requiring_contact_before_visiting: bool = True
    schedule_events: List[TimeRange] = []
    schedule_description: Optional[str] = None
    area_id: OptionalId = None
    community_id: OptionalId = None
    contact_email: OptionalEmail = None
    status: Optional[str] = Field(default=None, max_length=50)
    affiliation: Optional[str] = Field(default=None, max_length=50)


class IGroupUpdate(GroupUpdate):
    log_id: OptionalId = None
    is_accepting_initiated_visitors: bool = None
    is_accepting_uninitiated_visitors: bool = None
    is_requiring_contact_before_visiting: bool = None
    schedule_events: List[TimeRange] = None
    schedule_description: Optional[str] = None
    area_id: OptionalId = None
    community_id: OptionalId = None
    contact_email: OptionalEmail = None
    status: Optional[str] = Field(default=None, max_length=50)
    affiliation: Optional[str] = Field(default=None, max_length=50)


class IGroupFilters(SQLModel):
    """Query-string filters of the integration group list."""

    active: Optional[str] = None
    search: Optional[str] = None
    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    initiated: Optional[str] = None
    uninitiated: Optional[str] = None
    days: Optional[str] = None
    dates: Optional[str] = None
    time: Optional[str] = None
    by: Optional[str] = None
    order: Optional[str] = None


def parse_days(raw: str) -> List[int]:
    return [DAY_NUMBERS[d.lower()] for d in re.split(r"[\s,+]+", raw) if d.lower() in DAY_NUMBERS]


def _parse_moment(raw: str, param: str) -> datetime:
    try:
        return as_utc(raw.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {param} parameter")


def _parse_time_of_day(raw: str) -> TimeOfDay:
    try:
        return TimeOfDay.fromisoformat(raw.strip())
    except ValueError:
        return _parse_moment(raw, "time").timetz()


def _starts(record: dict) -> Iterable[datetime]:
    for entry in record.get("schedule_events") or []:
        if entry.get("start"):
            yield as_utc(entry["start"])


def meets_on_days(record: dict, days: List[int]) -> bool:
    return any(start.isoweekday() % 7 in days for start in _starts(record))


def meets_on_date(record: dict, moment: datetime) -> bool:
    for entry in record.get("schedule_events") or []:
        if not entry.get("start"):
            continue
        start = as_utc(entry["start"])
        end = as_utc(entry["end"]) if entry.get("end") else start
        if start <= moment <= end:
            return True
    return False


def meets_near_time(record: dict, at: TimeOfDay) -> bool:
    wanted = at.hour * 60 + at.minute
    return any(
        abs(start.hour * 60 + start.minute - wanted) <= TIME_WINDOW_MINUTES for start in _starts(record)
    )


def _summary(row: Optional[SQLModel], *fields: str) -> Optional[dict]:
    if row is None:
        return None
    return row.model_dump(include=set(fields))


async def attach_related(session: AsyncSession, records: List[dict]) -> List[dict]:
    """Embed area, community, venue (with physical address) and contacts."""
    areas = await rows_by_id(session, Area, (r["area_id"] for r in records))
    communities = await rows_by_id(session, Community, (r["community_id"] for r in records))
    venues = await rows_by_id(session, Venue, (r["venue_id"] for r in records))
    addresses = await rows_by_id(session, Address, (v.physical_address_id for v in venues.values()))
    people = await rows_by_id(
        session,
        Person,
        [r["public_contact_id"] for r in records] + [r["primary_contact_id"] for r in records],
    )
    contact_fields = ("id", "first_name", "last_name", "email", "phone")
    for record in records:
        record["area"] = _summary(areas.get(record["area_id"]), "id", "name", "code", "color", "is_active")
        record["community"] = _summary(
            communities.get(record["community_id"]), "id", "name", "code", "color", "is_active"
        )
        venue = venues.get(record["venue_id"])
        if venue is None:
            record["venue"] = None
        else:
            record["venue"] = _summary(venue, "id", "name", "phone", "email", "timezone", "website")
            address = addresses.get(venue.physical_address_id)
            record["venue"]["physical_address"] = address.model_dump() if address else None
        record["public_contact"] = _summary(people.get(record["public_contact_id"]), *contact_fields)
        record["primary_contact"] = _summary(people.get(record["primary_contact_id"]), *contact_fields)
    return records


async def list_i_groups(
    session: AsyncSession,
    filters: IGroupFilters,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_miles: float = DEFAULT_RADIUS_MILES,
) -> List[dict]:
    statement = group_join(IGroup)

    is_active = parse_bool(filters.active)
    if is_active is not None:
        statement = statement.where(IGroup.is_active == is_active)
    clause = name_clause(filters.name, filters.search)
    if clause is not None:
        statement = statement.where(clause)
    initiated = parse_bool(filters.initiated)
    if initiated is not None:
        statement = statement.where(IGroup.is_accepting_initiated_visitors == initiated)
    uninitiated = parse_bool(filters.uninitiated)
    if uninitiated is not None:
        statement = statement.where(IGroup.is_accepting_uninitiated_visitors == uninitiated)

    if filters.city or filters.state or filters.zipcode:
        statement = statement.join(Venue, Venue.id == Group.venue_id).join(
            Address, Address.id == Venue.physical_address_id
        )
        if filters.zipcode:
            statement = statement.where(Address.postal_code == filters.zipcode.strip())
        else:
            if filters.city:
                statement = statement.where(func.lower(Address.city) == filters.city.strip().lower())
            if filters.state:
                statement = statement.where(func.lower(Address.state) == filters.state.strip().lower())

    geolocated = lat is not None and lng is not None
    sort_by = filters.by or ("distance" if geolocated else "created_at")
    ascending = (filters.order or ("ascending" if sort_by == "distance" else "descending")) == "ascending"
    if sort_by != "distance":
        column = col(Group.name) if sort_by == "name" else col(Group.created_at)
        statement = statement.order_by(column.asc() if ascending else column.desc())

    result = await session.exec(statement)
    records = [merge_group(group, i_group) for group, i_group in result.all()]

    if filters.days:
        days = parse_days(filters.days)
        records = [r for r in records if meets_on_days(r, days)]
    if filters.dates:
        moment = _parse_moment(filters.dates, "dates")
        records = [r for r in records if meets_on_date(r, moment)]
    if filters.time:
        at = _parse_time_of_day(filters.time)
        records = [r for r in records if meets_near_time(r, at)]

    if geolocated:
        nearby = within_radius(records, lat, lng, radius_miles)
        if sort_by == "distance":
            records = nearby if ascending else nearby[::-1]
        else:
            by_id = {r["id"]: r for r in nearby}
            records = [by_id[r["id"]] for r in records if r["id"] in by_id]

    return await attach_related(session, records)


async def get_i_group(session: AsyncSession, group_id: UUID) -> dict:
    """One integration group, with ``members`` expanded to people."""
    group, i_group = await get_with_group_or_404(session, IGroup, group_id, LABEL)
    record = merge_group(group, i_group)
    member_ids = list(record["members"] or [])
    members = await rows_by_id(session, Person, [UUID(str(m)) for m in member_ids])
    record["member_ids"] = member_ids
    record["members"] = [person.model_dump() for person in members.values()]
    records = await attach_related(session, [record])
    return records[0]


async def create_i_group(session: AsyncSession, payload: IGroupCreate) -> dict:
    record = await create_with_group(session, IGroup, payload.model_dump())
    records = await attach_related(session, [record])
    return records[0]


async def update_i_group(session: AsyncSession, group_id: UUID, payload: IGroupUpdate) -> dict:
    record = await update_with_group(session, IGroup, group_id, payload.model_dump(exclude_unset=True), LABEL)
    records = await attach_related(session, [record])
    return records[0]


async def delete_i_group(session: AsyncSession, group_id: UUID) -> UUID:
    """Soft delete of the base group; the integration group row is deactivated."""
    group, i_group = await get_with_group_or_404(session, IGroup, group_id, LABEL)
    apply_changes(group, {"deleted_at": utcnow(), "is_active": False})
    apply_changes(i_group, {"is_active": False})
    session.add(group)
    session.add(i_group)
    await session.commit()
    logger.info("Deleted integration group {}", group_id)
    return group_id


async def i_group_stats(
    session: AsyncSession,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_miles: float = DEFAULT_RADIUS_MILES,
) -> dict:
    stats = await activity_stats(session, IGroup)
    stats["accepting_initiated_visitors"] = await count_rows(
        session,
        IGroup,
        IGroup.is_active == True,  # noqa: E712
        IGroup.is_accepting_initiated_visitors == True,  # noqa: E712
    )
    stats["accepting_uninitiated_visitors"] = await count_rows(
        session,
        IGroup,
        IGroup.is_active == True,  # noqa: E712
        IGroup.is_accepting_uninitiated_visitors == True,  # noqa: E712
    )
    if lat is None or lng is None:
        return stats

    result = await session.exec(group_join(IGroup))
    records = [merge_group(group, i_group) for group, i_group in result.all()]
    nearby = within_radius(records, lat, lng, radius_miles)
    active = [r for r in nearby if r["is_active"]]
    stats["nearby"] = {
        "radius_miles": radius_miles,
        "latitude": lat,
        "longitude": lng,
        "active": len(active),
        "inactive": len(nearby) - len(active),
        "total": len(nearby),
        "accepting_initiated_visitors": sum(1 for r in active if r["is_accepting_initiated_visitors"]),
        "accepting_uninitiated_visitors": sum(1 for r in active if r["is_accepting_uninitiated_visitors"]),
    }
    return stats
