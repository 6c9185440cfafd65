from typing import Dict, List, Optional, Sequence
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlmodel import col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Event, NwtaEvent, NwtaRole, NwtaRoleType, Person
from emma.services.common import (
    IdString,
    apply_changes,
    parse_bool,
    rows_by_id,
    search_clause,
    split_fields,
)
from emma.services.events import (
    EventCreate,
    EventUpdate,
    apply_event_changes,
    get_nwta_type_ids,
    new_event,
    serialize_events,
)

LABEL = "NWTA event"
NWTA_FIELDS = ("rookies", "elders", "mos")
INVALID_PUBLISHED = "Invalid published parameter. Only 'true' or 'false' are accepted."
ROLE_TYPE_FIELDS = {"id", "name", "summary", "experience_level", "work_points", "preparation_points"}


class NwtaEventCreate(EventCreate):
    rookies: List[IdString] = []
    elders: List[IdString] = []
    mos: List[IdString] = []


class NwtaEventUpdate(EventUpdate):
    rookies: List[IdString] = None
    elders: List[IdString] = None
    mos: List[IdString] = None


def parse_published(value: Optional[str]) -> Optional[bool]:
    """Unlike other boolean filters, an unrecognised value is rejected."""
    if value is None:
        return None
    if value not in ("true", "false"):
        raise HTTPException(status_code=400, detail=INVALID_PUBLISHED)
    return value == "true"


async def _roles_by_event(session: AsyncSession, event_ids: List[UUID]) -> Dict[UUID, List[dict]]:
    grouped: Dict[UUID, List[dict]] = {event_id: [] for event_id in event_ids}
    if not event_ids:
        return grouped
    result = await session.exec(
        select(NwtaRole).where(col(NwtaRole.nwta_event_id).in_(event_ids)).order_by(NwtaRole.created_at)
    )
    roles = result.all()
    role_types = await rows_by_id(session, NwtaRoleType, (role.role_type_id for role in roles))
    leads = await rows_by_id(session, Person, (role.lead_warrior_id for role in roles))
    for role in roles:
        record = role.model_dump(exclude={"nwta_event_id", "created_at", "updated_at"})
        role_type = role_types.get(role.role_type_id)
        record["role_type"] = role_type.model_dump(include=ROLE_TYPE_FIELDS) if role_type else None
        lead = leads.get(role.lead_warrior_id)
        record["lead_warrior"] = (
            {"id": lead.id, "person": lead.model_dump(include={"first_name", "last_name", "email"})}
            if lead
            else None
        )
        grouped.setdefault(role.nwta_event_id, []).append(record)
    return grouped


async def serialize_nwta_events(session: AsyncSession, rows: Sequence[tuple]) -> List[dict]:
    """Event records extended with the NWTA lists and the staffing roles."""
    events = [event for event, _ in rows]
    records = await serialize_events(session, events)
    roles = await _roles_by_event(session, [event.id for event in events])
    for record, (event, nwta) in zip(records, rows):
        for field in NWTA_FIELDS:
            record[field] = getattr(nwta, field) or []
        record["nwta_created_at"] = nwta.created_at
        record["nwta_updated_at"] = nwta.updated_at
        record["roles"] = roles.get(event.id, [])
    return records


def _nwta_join():
    return select(Event, NwtaEvent).join(NwtaEvent, NwtaEvent.id == Event.id)


async def list_nwta_events(
    session: AsyncSession,
    active: Optional[str] = None,
    published: Optional[str] = None,
    search: Optional[str] = None,
) -> List[dict]:
    is_published = parse_published(published)
    statement = _nwta_join()
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Event.is_active == is_active)
    if is_published is not None:
        statement = statement.where(Event.is_published == is_published)
    clause = search_clause(search, Event.name, Event.description)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Event.created_at).desc()))
    return await serialize_nwta_events(session, result.all())


async def _get_rows_or_404(session: AsyncSession, event_id: UUID):
    nwta = await session.get(NwtaEvent, event_id)
    event = await session.get(Event, event_id) if nwta else None
    if event is None:
        raise HTTPException(status_code=404, detail=f"{LABEL} not found")
    return event, nwta


async def get_nwta_event(session: AsyncSession, event_id: UUID) -> dict:
    row = await _get_rows_or_404(session, event_id)
    records = await serialize_nwta_events(session, [row])
    return records[0]


async def create_nwta_event(session: AsyncSession, payload: NwtaEventCreate) -> dict:
    """Insert the event and its NWTA row together.

    Without an explicit type the event gets the ``NWTA`` event type, when one exists.
    """
    nwta_data, event_data = split_fields(payload.model_dump(), NWTA_FIELDS)
    if event_data["event_type_id"] is None:
        nwta_type_ids = await get_nwta_type_ids(session)
        if nwta_type_ids:
            event_data["event_type_id"] = nwta_type_ids[0]
    event = new_event(event_data)
    session.add(event)
    await session.flush()
    nwta = NwtaEvent(id=event.id, **nwta_data)
    session.add(nwta)
    await session.commit()
    await session.refresh(event)
    await session.refresh(nwta)
    logger.info("Created NWTA event {} ({})", event.id, event.name)
    records = await serialize_nwta_events(session, [(event, nwta)])
    return records[0]


async def update_nwta_event(session: AsyncSession, event_id: UUID, payload: NwtaEventUpdate) -> dict:
    event, nwta = await _get_rows_or_404(session, event_id)
    nwta_changes, event_changes = split_fields(payload.model_dump(exclude_unset=True), NWTA_FIELDS)
    if event_changes:
        apply_event_changes(event, event_changes)
        session.add(event)
    if nwta_changes:
        apply_changes(nwta, nwta_changes)
        session.add(nwta)
    await session.commit()
    await session.refresh(event)
    await session.refresh(nwta)
    logger.info("Updated NWTA event {}", event_id)
    records = await serialize_nwta_events(session, [(event, nwta)])
    return records[0]


async def delete_nwta_event(session: AsyncSession, event_id: UUID) -> UUID:
    """Removes the event together with its NWTA row and roles."""
    event, nwta = await _get_rows_or_404(session, event_id)
    await session.exec(delete(NwtaRole).where(NwtaRole.nwta_event_id == event_id))
    await session.delete(nwta)
    await session.flush()
    await session.delete(event)
    await session.commit()
    logger.info("Deleted NWTA event {}", event_id)
    return event_id
