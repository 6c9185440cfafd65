from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import or_
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import NWTA_CODE, Event, EventType, Transaction
from emma.services.common import (
    IdString,
    OptionalId,
    TimeRange,
    apply_changes,
    archive,
    count_rows,
    get_or_404,
    parse_bool,
    search_clause,
)
from emma.services.publication import as_utc, publication_summary


class EventCreate(SQLModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    event_type_id: OptionalId = None
    area_id: OptionalId = None
    community_id: OptionalId = None
    venue_id: OptionalId = None
    staff_cost: int = Field(default=0, ge=0)
    staff_capacity: int = Field(default=0, ge=0)
    potential_staff: List[IdString] = []
    committed_staff: List[IdString] = []
    alternate_staff: List[IdString] = []
    participant_cost: int = Field(default=0, ge=0)
    participant_capacity: int = Field(default=0, ge=0)
    potential_participants: List[IdString] = []
    committed_participants: List[IdString] = []
    waitlist_participants: List[IdString] = []
    primary_leader_id: OptionalId = None
    leaders: List[IdString] = []
    participant_schedule: List[TimeRange] = []
    staff_schedule: List[TimeRange] = []
    participant_published_time: Optional[TimeRange] = None
    staff_published_time: Optional[TimeRange] = None
    is_published: bool = False
    is_active: bool = True


class EventUpdate(SQLModel):
    name: str = Field(default=None, min_length=1)
    description: Optional[str] = None
    event_type_id: OptionalId = None
    area_id: OptionalId = None
    community_id: OptionalId = None
    venue_id: OptionalId = None
    transaction_log_id: UUID = None
    staff_cost: int = Field(default=None, ge=0)
    staff_capacity: int = Field(default=None, ge=0)
    potential_staff: List[IdString] = None
    committed_staff: List[IdString] = None
    alternate_staff: List[IdString] = None
    participant_cost: int = Field(default=None, ge=0)
    participant_capacity: int = Field(default=None, ge=0)
    potential_participants: List[IdString] = None
    committed_participants: List[IdString] = None
    waitlist_participants: List[IdString] = None
    primary_leader_id: OptionalId = None
    leaders: List[IdString] = None
    participant_schedule: List[TimeRange] = None
    staff_schedule: List[TimeRange] = None
    participant_published_time: Optional[TimeRange] = None
    staff_published_time: Optional[TimeRange] = None
    is_published: bool = None
    is_active: bool = None


def schedule_bounds(schedule: Sequence[dict]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Earliest start and latest end of a schedule, or (None, None) when empty."""
    if not schedule:
        return None, None
    starts = [as_utc(entry["start"]) for entry in schedule]
    ends = [as_utc(entry["end"]) for entry in schedule]
    return min(starts), max(ends)


async def get_nwta_type_ids(session: AsyncSession) -> List[UUID]:
    result = await session.exec(select(EventType.id).where(EventType.code == NWTA_CODE))
    return list(result.all())


async def _nwta_exclusion(session: AsyncSession, nwta: Optional[str]):
    """Condition hiding NWTA events unless ``nwta=include`` was requested."""
    if nwta == "include":
        return None
    nwta_ids = await get_nwta_type_ids(session)
    if not nwta_ids:
        return None
    return or_(col(Event.event_type_id).is_(None), col(Event.event_type_id).not_in(nwta_ids))


async def _transactions_by_log(session: AsyncSession, log_ids: List[UUID]) -> Dict[UUID, List[Transaction]]:
    grouped: Dict[UUID, List[Transaction]] = {log_id: [] for log_id in log_ids}
    if not log_ids:
        return grouped
    statement = (
        select(Transaction)
        .where(col(Transaction.log_id).in_(log_ids))
        .order_by(Transaction.ordering)
    )
    result = await session.exec(statement)
    for transaction in result.all():
        grouped.setdefault(transaction.log_id, []).append(transaction)
    return grouped


async def _event_types_by_id(session: AsyncSession) -> Dict[UUID, EventType]:
    result = await session.exec(select(EventType))
    return {event_type.id: event_type for event_type in result.all()}


async def serialize_events(session: AsyncSession, events: Sequence[Event]) -> List[dict]:
    """Attach event type, transactions and derived publication status."""
    transactions = await _transactions_by_log(session, [e.transaction_log_id for e in events])
    event_types = await _event_types_by_id(session)
    records = []
    for event in events:
        record = event.model_dump()
        event_type = event_types.get(event.event_type_id)
        record["event_type"] = event_type.model_dump() if event_type else None
        record["transactions"] = transactions.get(event.transaction_log_id, [])
        record["publication_status"] = publication_summary(event)
        records.append(record)
    return records


async def list_events(
    session: AsyncSession,
    active: Optional[str] = None,
    published: Optional[str] = None,
    search: Optional[str] = None,
    nwta: Optional[str] = None,
) -> List[Event]:
    statement = select(Event)

    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Event.is_active == is_active)

    is_published = parse_bool(published)
    if is_published is not None:
        statement = statement.where(Event.is_published == is_published)

    exclusion = await _nwta_exclusion(session, nwta)
    if exclusion is not None:
        statement = statement.where(exclusion)

    clause = search_clause(search, Event.name, Event.description)
    if clause is not None:
        statement = statement.where(clause)

    result = await session.exec(statement.order_by(col(Event.created_at).desc()))
    return result.all()


async def get_event_or_404(session: AsyncSession, event_id: UUID) -> Event:
    return await get_or_404(session, Event, event_id, "Event")


async def ensure_event_exists(session: AsyncSession, event_id: Optional[UUID], detail: str) -> None:
    """Reject a reference to an event that is not stored."""
    if event_id is None:
        return
    if await session.get(Event, event_id) is None:
        raise HTTPException(status_code=400, detail=detail)


def new_event(data: dict) -> Event:
    data["start_at"], data["end_at"] = schedule_bounds(data["participant_schedule"])
    return Event(**data)


def apply_event_changes(event: Event, changes: dict) -> Event:
    if "participant_schedule" in changes:
        changes["start_at"], changes["end_at"] = schedule_bounds(changes["participant_schedule"])
    return apply_changes(event, changes)


async def create_event(session: AsyncSession, payload: EventCreate) -> Event:
    event = new_event(payload.model_dump())
    session.add(event)
    await session.commit()
    await session.refresh(event)
    logger.info("Created event {} ({})", event.id, event.name)
    return event


async def update_event(session: AsyncSession, event_id: UUID, payload: EventUpdate) -> Event:
    event = await get_event_or_404(session, event_id)
    apply_event_changes(event, payload.model_dump(exclude_unset=True))
    session.add(event)
    await session.commit()
    await session.refresh(event)
    logger.info("Updated event {}", event.id)
    return event


async def archive_event(session: AsyncSession, event_id: UUID) -> UUID:
    await archive(session, Event, event_id, "Event")
    logger.info("Archived event {}", event_id)
    return event_id


async def event_stats(session: AsyncSession, nwta: Optional[str] = None) -> dict:
    exclusion = await _nwta_exclusion(session, nwta)
    scope = [exclusion] if exclusion is not None else []
    total = await count_rows(session, Event, *scope)
    active = await count_rows(session, Event, Event.is_active == True, *scope)  # noqa: E712
    published = await count_rows(session, Event, Event.is_published == True, *scope)  # noqa: E712
    return {
        "active": active,
        "inactive": total - active,
        "total": total,
        "published": published,
    }
