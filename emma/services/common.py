from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Type, TypeVar
from uuid import UUID

from fastapi import HTTPException
from pydantic import AnyHttpUrl, BeforeValidator, EmailStr, PlainSerializer
from sqlalchemy import func, or_
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing_extensions import Annotated

from emma.models import utcnow

ModelT = TypeVar("ModelT", bound=SQLModel)


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def to_utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# Request field types. Optional ids/emails/urls accept "" as null, and values
# that end up in JSON columns serialize to plain strings.
OptionalId = Annotated[Optional[UUID], BeforeValidator(blank_to_none)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(blank_to_none)]
OptionalUrl = Annotated[
    Optional[AnyHttpUrl],
    BeforeValidator(blank_to_none),
    PlainSerializer(lambda url: str(url) if url is not None else None, return_type=Optional[str]),
]
IdString = Annotated[UUID, PlainSerializer(str, return_type=str)]
UtcTimestamp = Annotated[datetime, PlainSerializer(to_utc_iso, return_type=str)]


class TimeRange(SQLModel):
    start: UtcTimestamp
    end: UtcTimestamp


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Only the literal strings "true" and "false" count as a filter."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def search_clause(term: Optional[str], *columns):
    if not term or not term.strip():
        return None
    pattern = f"%{term.strip()}%"
    return or_(*[col(column).ilike(pattern) for column in columns])


async def get_or_404(session: AsyncSession, model: Type[ModelT], id: UUID, label: str) -> ModelT:
    obj = await session.get(model, id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


def apply_changes(obj: SQLModel, changes: dict) -> SQLModel:
    for key, value in changes.items():
        setattr(obj, key, value)
    if hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return obj


def split_fields(payload: dict, fields: Iterable[str]):
    """Split ``payload`` into the keys listed in ``fields`` and the rest."""
    field_set = set(fields)
    selected = {k: v for k, v in payload.items() if k in field_set}
    remainder = {k: v for k, v in payload.items() if k not in field_set}
    return selected, remainder


async def count_rows(session: AsyncSession, model: Type[SQLModel], *conditions) -> int:
    statement = select(func.count()).select_from(model)
    for condition in conditions:
        statement = statement.where(condition)
    result = await session.exec(statement)
    return result.one()


async def activity_stats(session: AsyncSession, model: Type[SQLModel], *conditions) -> dict:
    """Active, inactive and total row counts, optionally narrowed by ``conditions``."""
    total = await count_rows(session, model, *conditions)
    active = await count_rows(session, model, model.is_active == True, *conditions)  # noqa: E712
    return {"active": active, "inactive": total - active, "total": total}


async def ensure_unique_code(
    session: AsyncSession,
    model: Type[SQLModel],
    code: Optional[str],
    label: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    if code is None:
        return
    statement = select(model.id).where(model.code == code)
    if exclude_id is not None:
        statement = statement.where(model.id != exclude_id)
    result = await session.exec(statement)
    if result.first() is not None:
        raise HTTPException(status_code=400, detail=f"{label} code must be unique")


async def archive(session: AsyncSession, model: Type[ModelT], id: UUID, label: str) -> UUID:
    """Mark a row inactive instead of deleting it."""
    obj = await get_or_404(session, model, id, label)
    apply_changes(obj, {"is_active": False})
    session.add(obj)
    await session.commit()
    return id


async def rows_by_id(
    session: AsyncSession, model: Type[ModelT], ids: Iterable[Optional[UUID]]
) -> Dict[UUID, ModelT]:
    """Fetch the rows whose ids appear in ``ids``, keyed by id."""
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    result = await session.exec(select(model).where(col(model.id).in_(wanted)))
    return {row.id: row for row in result.all()}
