from typing import List
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlmodel import SQLModel, col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Area, AreaAdmin, Person
from emma.services.common import get_or_404, rows_by_id

INVALID_REFERENCE = "Invalid area or person ID"
ALREADY_ADMIN = "Person is already an admin for this area"
ADMIN_FIELDS = {"id", "first_name", "middle_name", "last_name", "email", "photo_url"}


class AreaAdminCreate(SQLModel):
    person_id: UUID


class AreaAdminsReplace(SQLModel):
    admin_ids: List[UUID]


def admin_summary(person: Person) -> dict:
    return person.model_dump(include=ADMIN_FIELDS)


async def list_area_admins(session: AsyncSession, area_id: UUID) -> List[dict]:
    await get_or_404(session, Area, area_id, "Area")
    statement = (
        select(Person)
        .join(AreaAdmin, AreaAdmin.person_id == Person.id)
        .where(AreaAdmin.area_id == area_id)
        .order_by(col(AreaAdmin.created_at))
    )
    result = await session.exec(statement)
    return [admin_summary(person) for person in result.all()]


async def add_area_admin(session: AsyncSession, area_id: UUID, person_id: UUID) -> dict:
    area = await session.get(Area, area_id)
    person = await session.get(Person, person_id)
    if area is None or person is None:
        raise HTTPException(status_code=400, detail=INVALID_REFERENCE)
    existing = await session.exec(
        select(AreaAdmin.id).where(AreaAdmin.area_id == area_id, AreaAdmin.person_id == person_id)
    )
    if existing.first() is not None:
        raise HTTPException(status_code=400, detail=ALREADY_ADMIN)
    session.add(AreaAdmin(area_id=area_id, person_id=person_id))
    await session.commit()
    logger.info("Added admin {} to area {}", person_id, area_id)
    return admin_summary(person)


async def replace_area_admins(session: AsyncSession, area_id: UUID, admin_ids: List[UUID]) -> List[dict]:
    """Make ``admin_ids`` the complete admin list of the area."""
    person_ids = list(dict.fromkeys(admin_ids))
    area = await session.get(Area, area_id)
    people = await rows_by_id(session, Person, person_ids)
    if area is None or len(people) != len(person_ids):
        raise HTTPException(status_code=400, detail=INVALID_REFERENCE)
    await session.exec(delete(AreaAdmin).where(AreaAdmin.area_id == area_id))
    session.add_all([AreaAdmin(area_id=area_id, person_id=person_id) for person_id in person_ids])
    await session.commit()
    logger.info("Replaced admins of area {} ({} admins)", area_id, len(person_ids))
    return [admin_summary(people[person_id]) for person_id in person_ids]


async def remove_area_admin(session: AsyncSession, area_id: UUID, person_id: UUID) -> None:
    await session.exec(
        delete(AreaAdmin).where(AreaAdmin.area_id == area_id, AreaAdmin.person_id == person_id)
    )
    await session.commit()
    logger.info("Removed admin {} from area {}", person_id, area_id)
