from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import Field, SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import Address
from emma.services.common import apply_changes, count_rows, get_or_404, search_clause

LABEL = "Address"


class AddressCreate(SQLModel):
    address_1: str = Field(min_length=1)
    address_2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(default="United States", min_length=1)


class AddressUpdate(SQLModel):
    address_1: str = Field(default=None, min_length=1)
    address_2: Optional[str] = None
    city: str = Field(default=None, min_length=1)
    state: str = Field(default=None, min_length=1)
    postal_code: str = Field(default=None, min_length=1)
    country: str = Field(default=None, min_length=1)


async def list_addresses(session: AsyncSession, search: Optional[str] = None) -> List[Address]:
    statement = select(Address)
    clause = search_clause(
        search,
        Address.address_1,
        Address.address_2,
        Address.city,
        Address.state,
        Address.postal_code,
        Address.country,
    )
    if clause is not None:
        statement = statement.where(clause)
    result = await session.exec(statement.order_by(col(Address.created_at).desc()))
    return result.all()


async def get_address_or_404(session: AsyncSession, address_id: UUID) -> Address:
    return await get_or_404(session, Address, address_id, LABEL)


async def create_address(session: AsyncSession, payload: AddressCreate) -> Address:
    address = Address(**payload.model_dump())
    session.add(address)
    await session.commit()
    await session.refresh(address)
    logger.info("Created address {} ({}, {})", address.id, address.city, address.state)
    return address


async def update_address(session: AsyncSession, address_id: UUID, payload: AddressUpdate) -> Address:
    address = await get_address_or_404(session, address_id)
    apply_changes(address, payload.model_dump(exclude_unset=True))
    session.add(address)
    await session.commit()
    await session.refresh(address)
    logger.info("Updated address {}", address_id)
    return address


async def delete_address(session: AsyncSession, address_id: UUID) -> UUID:
    address = await get_address_or_404(session, address_id)
    await session.delete(address)
    await session.commit()
    logger.info("Deleted address {}", address_id)
    return address_id


async def address_stats(session: AsyncSession) -> dict:
    return {"total": await count_rows(session, Address)}
