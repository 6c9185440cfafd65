from typing import List, Optional, Tuple, Type
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Person, Prospect, Registrant, Warrior
from emma.services.common import (
    OptionalEmail,
    OptionalId,
    OptionalUrl,
    apply_changes,
    get_or_404,
    parse_bool,
    search_clause,
    split_fields,
)


class PersonCreate(SQLModel):
    first_name: str = Field(min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(min_length=1)
    email: OptionalEmail = None
    phone: Optional[str] = None
    billing_address_id: OptionalId = None
    mailing_address_id: OptionalId = None
    physical_address_id: OptionalId = None
    notes: Optional[str] = None
    photo_url: OptionalUrl = None
    is_active: bool = True


class PersonUpdate(SQLModel):
    # Omitted fields keep their stored value; required columns reject an explicit null.
    first_name: str = Field(default=None, min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(default=None, min_length=1)
    email: OptionalEmail = None
    phone: Optional[str] = None
    billing_address_id: OptionalId = None
    mailing_address_id: OptionalId = None
    physical_address_id: OptionalId = None
    notes: Optional[str] = None
    photo_url: OptionalUrl = None
    is_active: bool = None


PERSON_FIELDS = tuple(PersonCreate.model_fields.keys())


def merge_person(person: Person, extension: SQLModel) -> dict:
    """Flatten a person and its extension row into one record."""
    record = person.model_dump()
    record.update(extension.model_dump())
    return record


async def list_people(
    session: AsyncSession,
    active: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Person]:
    statement = select(Person)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Person.is_active == is_active)
    clause = search_clause(search, Person.first_name, Person.last_name)
    if clause is not None:
        statement = statement.where(clause)
    statement = statement.order_by(col(Person.created_at).desc())
    result = await session.exec(statement)
    return result.all()


async def get_person_or_404(session: AsyncSession, person_id: UUID) -> Person:
    return await get_or_404(session, Person, person_id, "Person")


async def create_person(session: AsyncSession, payload: PersonCreate) -> Person:
    person = Person(**payload.model_dump())
    session.add(person)
    await session.commit()
    await session.refresh(person)
    logger.info("Created person {}", person.id)
    return person


async def update_person(session: AsyncSession, person_id: UUID, payload: PersonUpdate) -> Person:
    person = await get_person_or_404(session, person_id)
    apply_changes(person, payload.model_dump(exclude_unset=True))
    session.add(person)
    await session.commit()
    await session.refresh(person)
    logger.info("Updated person {}", person.id)
    return person


async def delete_person(session: AsyncSession, person_id: UUID) -> UUID:
    person = await get_person_or_404(session, person_id)
    for extension in (Warrior, Registrant, Prospect):
        await session.exec(delete(extension).where(extension.id == person_id))
    await session.delete(person)
    await session.commit()
    logger.info("Deleted person {}", person_id)
    return person_id


async def set_photo_url(session: AsyncSession, person: Person, photo_url: Optional[str]) -> Person:
    apply_changes(person, {"photo_url": photo_url})
    session.add(person)
    await session.commit()
    await session.refresh(person)
    return person


async def list_with_person(
    session: AsyncSession,
    extension_model: Type[SQLModel],
    *conditions,
    active: Optional[str] = None,
    search: Optional[str] = None,
) -> List[dict]:
    """List an extension table joined to ``people``, as flat records."""
    statement = select(Person, extension_model).join(extension_model, extension_model.id == Person.id)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(extension_model.is_active == is_active)
    clause = search_clause(search, Person.first_name, Person.last_name)
    if clause is not None:
        statement = statement.where(clause)
    for condition in conditions:
        statement = statement.where(condition)
    statement = statement.order_by(col(extension_model.created_at).desc())
    result = await session.exec(statement)
    return [merge_person(person, extension) for person, extension in result.all()]


async def get_with_person_or_404(
    session: AsyncSession, extension_model: Type[SQLModel], person_id: UUID, label: str
) -> Tuple[Person, SQLModel]:
    extension = await get_or_404(session, extension_model, person_id, label)
    person = await get_or_404(session, Person, person_id, label)
    return person, extension


async def create_with_person(session: AsyncSession, extension_model: Type[SQLModel], data: dict) -> dict:
    """Insert the person row and its extension row in one transaction."""
    person_data, extension_data = split_fields(data, PERSON_FIELDS)
    extension_data["is_active"] = person_data.get("is_active", True)
    person = Person(**person_data)
    session.add(person)
    await session.flush()
    extension = extension_model(id=person.id, **extension_data)
    session.add(extension)
    await session.commit()
    await session.refresh(person)
    await session.refresh(extension)
    logger.info("Created {} {}", extension_model.__tablename__, person.id)
    return merge_person(person, extension)


async def update_with_person(
    session: AsyncSession,
    extension_model: Type[SQLModel],
    person_id: UUID,
    changes: dict,
    label: str,
) -> dict:
    person, extension = await get_with_person_or_404(session, extension_model, person_id, label)
    person_changes, extension_changes = split_fields(changes, PERSON_FIELDS)
    if "is_active" in person_changes:
        extension_changes["is_active"] = person_changes["is_active"]
    apply_changes(person, person_changes)
    apply_changes(extension, extension_changes)
    session.add(person)
    session.add(extension)
    await session.commit()
    await session.refresh(person)
    await session.refresh(extension)
    logger.info("Updated {} {}", extension_model.__tablename__, person_id)
    return merge_person(person, extension)


async def delete_with_person(
    session: AsyncSession, extension_model: Type[SQLModel], person_id: UUID, label: str
) -> UUID:
    person, extension = await get_with_person_or_404(session, extension_model, person_id, label)
    await session.delete(extension)
    await session.flush()
    await session.delete(person)
    await session.commit()
    logger.info("Deleted {} {}", extension_model.__tablename__, person_id)
    return person_id
