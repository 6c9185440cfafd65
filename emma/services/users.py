from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import or_
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import EmmaUser
from emma.services.common import apply_changes, count_rows, get_or_404, parse_bool

LABEL = "User"

# (document column, key) pairs searched by name and by email
NAME_KEYS = (
    ("auth0_user", "given_name"),
    ("auth0_user", "family_name"),
    ("civicrm_user", "first_name"),
    ("civicrm_user", "last_name"),
    ("drupal_user", "first_name"),
    ("drupal_user", "last_name"),
)
EMAIL_KEYS = (
    ("auth0_user", "email"),
    ("civicrm_user", "email_primary"),
    ("drupal_user", "email_primary"),
)


class UserCreate(SQLModel):
    auth0_user: Optional[Dict[str, Any]] = None
    civicrm_user: Optional[Dict[str, Any]] = None
    drupal_user: Optional[Dict[str, Any]] = None
    person: Optional[Dict[str, Any]] = None
    other_auth0_users: List[Any] = []
    other_civicrm_users: List[Any] = []
    other_drupal_users: List[Any] = []
    other_people: List[Any] = []
    approved_at: Optional[datetime] = None
    synchronized_at: Optional[datetime] = None


class UserUpdate(SQLModel):
    auth0_user: Optional[Dict[str, Any]] = None
    civicrm_user: Optional[Dict[str, Any]] = None
    drupal_user: Optional[Dict[str, Any]] = None
    person: Optional[Dict[str, Any]] = None
    other_auth0_users: List[Any] = None
    other_civicrm_users: List[Any] = None
    other_drupal_users: List[Any] = None
    other_people: List[Any] = None
    approved_at: Optional[datetime] = None
    synchronized_at: Optional[datetime] = None


def _document_key(column: str, key: str):
    return col(getattr(EmmaUser, column))[key].as_string()


async def list_users(
    session: AsyncSession,
    approved: Optional[str] = None,
    search: Optional[str] = None,
    email: Optional[str] = None,
) -> List[EmmaUser]:
    statement = select(EmmaUser)

    is_approved = parse_bool(approved)
    if is_approved is True:
        statement = statement.where(col(EmmaUser.approved_at).is_not(None))
    elif is_approved is False:
        statement = statement.where(col(EmmaUser.approved_at).is_(None))

    if email:
        statement = statement.where(or_(*[_document_key(c, k) == email for c, k in EMAIL_KEYS]))

    if search and search.strip():
        pattern = f"%{search.strip()}%"
        statement = statement.where(or_(*[_document_key(c, k).ilike(pattern) for c, k in NAME_KEYS]))

    result = await session.exec(statement.order_by(col(EmmaUser.created_at).desc()))
    return result.all()


async def get_user_or_404(session: AsyncSession, user_id: UUID) -> EmmaUser:
    return await get_or_404(session, EmmaUser, user_id, LABEL)


async def create_user(session: AsyncSession, payload: UserCreate) -> EmmaUser:
    user = EmmaUser(**payload.model_dump())
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Created user {}", user.id)
    return user


async def update_user(session: AsyncSession, user_id: UUID, payload: UserUpdate) -> EmmaUser:
    user = await get_user_or_404(session, user_id)
    apply_changes(user, payload.model_dump(exclude_unset=True))
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Updated user {}", user_id)
    return user


async def delete_user(session: AsyncSession, user_id: UUID) -> UUID:
    user = await get_user_or_404(session, user_id)
    await session.delete(user)
    await session.commit()
    logger.info("Deleted user {}", user_id)
    return user_id


async def user_stats(session: AsyncSession) -> dict:
    total = await count_rows(session, EmmaUser)
    approved = await count_rows(session, EmmaUser, col(EmmaUser.approved_at).is_not(None))
    result = await session.exec(select(EmmaUser.auth0_user, EmmaUser.civicrm_user, EmmaUser.drupal_user))
    by_auth_source: Dict[str, int] = {}
    for auth0_user, civicrm_user, drupal_user in result.all():
        for source, document in (("auth0", auth0_user), ("civicrm", civicrm_user), ("drupal", drupal_user)):
            if document:
                by_auth_source[source] = by_auth_source.get(source, 0) + 1
    return {
        "approved": approved,
        "pending": total - approved,
        "total": total,
        "by_auth_source": by_auth_source,
    }
