from typing import List, Optional, Tuple, Type
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Group, utcnow
from emma.services.common import (
    IdString,
    OptionalId,
    OptionalUrl,
    activity_stats,
    apply_changes,
    parse_bool,
    search_clause,
    split_fields,
)

LABEL = "Group"


class GroupCreate(SQLModel):
    name: str = Field(min_length=1)
    description: str
    url: OptionalUrl = None
    members: List[IdString] = []
    is_accepting_new_members: bool = False
    membership_criteria: Optional[str] = None
    venue_id: OptionalId = None
    genders: Optional[str] = None
    is_publicly_listed: bool = False
    public_contact_id: OptionalId = None
    primary_contact_id: OptionalId = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    is_active: bool = True


class GroupUpdate(SQLModel):
    name: str = Field(default=None, min_length=1)
    description: str = None
    url: OptionalUrl = None
    members: List[IdString] = None
    is_accepting_new_members: bool = None
    membership_criteria: Optional[str] = None
    venue_id: OptionalId = None
    genders: Optional[str] = None
    is_publicly_listed: bool = None
    public_contact_id: OptionalId = None
    primary_contact_id: OptionalId = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    is_active: bool = None


GROUP_FIELDS = tuple(GroupCreate.model_fields.keys())

NOT_DELETED = col(Group.deleted_at).is_(None)


def merge_group(group: Group, extension: SQLModel) -> dict:
    """Flatten a group and its extension row; the extension's activity wins."""
    record = group.model_dump()
    record.update(extension.model_dump())
    return record


def name_clause(name: Optional[str], search: Optional[str]):
    """``name`` matches the group name only and takes precedence over ``search``."""
    if name and name.strip():
        return search_clause(name, Group.name)
    return search_clause(search, Group.name, Group.description)


async def list_groups(
    session: AsyncSession,
    active: Optional[str] = None,
    search: Optional[str] = None,
    publicly_listed: Optional[str] = None,
) -> List[Group]:
    statement = select(Group).where(NOT_DELETED)
    is_active = parse_bool(active)
    if is_active is not None:
        statement = statement.where(Group.is_active == is_active)
    is_listed = parse_bool(publicly_listed)
    if is_listed is not None:
        statement = statement.where(Group.is_publicly_listed == is_listed)
    clause = search_clause(search, Group.name, Group.description)
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Group.created_at).desc()))
    return result.all()


async def get_group_or_404(session: AsyncSession, group_id: UUID, label: str = LABEL) -> Group:
    group = await session.get(Group, group_id)
    if group is None or group.deleted_at is not None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return group


async def create_group(session: AsyncSession, payload: GroupCreate) -> Group:
    group = Group(**payload.model_dump())
    session.add(group)
    await session.commit()
    await session.refresh(group)
    logger.info("Created group {} ({})", group.id, group.name)
    return group


async def update_group(session: AsyncSession, group_id: UUID, payload: GroupUpdate) -> Group:
    group = await get_group_or_404(session, group_id)
    apply_changes(group, payload.model_dump(exclude_unset=True))
    session.add(group)
    await session.commit()
    await session.refresh(group)
    logger.info("Updated group {}", group_id)
    return group


async def delete_group(session: AsyncSession, group_id: UUID) -> UUID:
    """Soft delete: the row stays, hidden from every read."""
    group = await get_group_or_404(session, group_id)
    apply_changes(group, {"deleted_at": utcnow(), "is_active": False})
    session.add(group)
    await session.commit()
    logger.info("Deleted group {}", group_id)
    return group_id


async def group_stats(session: AsyncSession) -> dict:
    return await activity_stats(session, Group, NOT_DELETED)


def group_join(extension_model: Type[SQLModel]):
    return (
        select(Group, extension_model)
        .join(extension_model, extension_model.id == Group.id)
        .where(NOT_DELETED)
    )


async def get_with_group_or_404(
    session: AsyncSession, extension_model: Type[SQLModel], group_id: UUID, label: str
) -> Tuple[Group, SQLModel]:
    extension = await session.get(extension_model, group_id)
    if extension is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    group = await get_group_or_404(session, group_id, label)
    return group, extension


async def create_with_group(session: AsyncSession, extension_model: Type[SQLModel], data: dict) -> dict:
    """Insert the base group row and its extension row in one transaction."""
    group_data, extension_data = split_fields(data, GROUP_FIELDS)
    extension_data["is_active"] = group_data.get("is_active", True)
    group = Group(**group_data)
    session.add(group)
    await session.flush()
    extension = extension_model(id=group.id, **extension_data)
    session.add(extension)
    await session.commit()
    await session.refresh(group)
    await session.refresh(extension)
    logger.info("Created {} {} ({})", extension_model.__tablename__, group.id, group.name)
    return merge_group(group, extension)


async def update_with_group(
    session: AsyncSession,
    extension_model: Type[SQLModel],
    group_id: UUID,
    changes: dict,
    label: str,
) -> dict:
    group, extension = await get_with_group_or_404(session, extension_model, group_id, label)
    group_changes, extension_changes = split_fields(changes, GROUP_FIELDS)
    if "is_active" in group_changes:
        extension_changes["is_active"] = group_changes["is_active"]
    if group_changes:
        apply_changes(group, group_changes)
        session.add(group)
    if extension_changes:
        apply_changes(extension, extension_changes)
        session.add(extension)
    await session.commit()
    await session.refresh(group)
    await session.refresh(extension)
    logger.info("Updated {} {}", extension_model.__tablename__, group_id)
    return merge_group(group, extension)
