from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.addresses import (
    AddressCreate,
    AddressUpdate,
    address_stats,
    create_address,
    delete_address,
    get_address_or_404,
    list_addresses,
    update_address,
)

router = APIRouter(prefix="/api/addresses", tags=["Addresses"])


@router.get("")
async def get_addresses(search: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    addresses = await list_addresses(session, search)
    return success_response(addresses, count=len(addresses))


@router.post("")
async def post_address(payload: AddressCreate, session: AsyncSession = Depends(get_session)):
    address = await create_address(session, payload)
    return success_response(address, message="Address created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/stats")
async def get_address_stats(session: AsyncSession = Depends(get_session)):
    return success_response(await address_stats(session))


@router.get("/{address_id}")
async def get_address(address_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_address_or_404(session, address_id))


@router.put("/{address_id}")
async def put_address(address_id: UUID, payload: AddressUpdate, session: AsyncSession = Depends(get_session)):
    address = await update_address(session, address_id, payload)
    return success_response(address, message="Address updated successfully")


@router.delete("/{address_id}")
async def remove_address(address_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_address(session, address_id)
    return success_response({"id": deleted_id}, message="Address deleted successfully")
