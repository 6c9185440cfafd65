from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.users import (
    UserCreate,
    UserUpdate,
    create_user,
    delete_user,
    get_user_or_404,
    list_users,
    update_user,
    user_stats,
)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
async def get_users(
    approved: Optional[str] = None,
    search: Optional[str] = None,
    email: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    users = await list_users(session, approved, search, email)
    return success_response(users, count=len(users))


@router.post("")
async def post_user(payload: UserCreate, session: AsyncSession = Depends(get_session)):
    user = await create_user(session, payload)
    return success_response(user, message="User created successfully", status_code=status.HTTP_201_CREATED)


@router.put("")
async def put_user_by_query(
    payload: UserUpdate,
    id: Optional[UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    if id is None:
        raise HTTPException(status_code=400, detail="User ID is required")
    user = await update_user(session, id, payload)
    return success_response(user, message="User updated successfully")


@router.get("/stats")
async def get_user_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await user_stats(session))


@router.get("/{user_id}")
async def get_user(user_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_user_or_404(session, user_id))


@router.put("/{user_id}")
async def put_user(user_id: UUID, payload: UserUpdate, session: AsyncSession = Depends(get_session)):
    user = await update_user(session, user_id, payload)
    return success_response(user, message="User updated successfully")


@router.delete("/{user_id}")
async def remove_user(user_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_user(session, user_id)
    return success_response({"id": deleted_id}, message="User deleted successfully")
