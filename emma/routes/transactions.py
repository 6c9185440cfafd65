from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from fastapi.exceptions import RequestValidationError
from pydantic import TypeAdapter, ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.services.transactions import (
    TransactionCreate,
    TransactionEntry,
    TransactionUpdate,
    create_transaction,
    create_transactions,
    delete_transaction,
    get_transaction_or_404,
    list_transactions,
    replace_transactions,
    transaction_stats,
    update_transaction,
)

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])

entries_adapter = TypeAdapter(List[TransactionEntry])


def _validate(adapter_or_model, body: Any):
    """Validate a body whose shape depends on the query string."""
    try:
        if isinstance(adapter_or_model, TypeAdapter):
            return adapter_or_model.validate_python(body)
        return adapter_or_model.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.get("")
async def get_transactions(log: Optional[UUID] = None, session: AsyncSession = Depends(get_session)):
    transactions = await list_transactions(session, log)
    return success_response(transactions, count=len(transactions))


@router.post("")
async def post_transactions(
    log: Optional[UUID] = None,
    body: Any = Body(...),
    session: AsyncSession = Depends(get_session),
):
    if log is not None:
        transactions = await create_transactions(session, log, _validate(entries_adapter, body))
        return success_response(
            transactions,
            message=f"Created {len(transactions)} transactions",
            status_code=status.HTTP_201_CREATED,
        )
    transaction = await create_transaction(session, _validate(TransactionCreate, body))
    return success_response(
        transaction, message="Transaction created successfully", status_code=status.HTTP_201_CREATED
    )


@router.put("")
async def put_transactions(
    log: Optional[UUID] = None,
    body: Any = Body(None),
    session: AsyncSession = Depends(get_session),
):
    entries = _validate(entries_adapter, body) if log is not None else []
    transactions = await replace_transactions(session, log, entries)
    return success_response(transactions, message=f"Updated {len(transactions)} transactions")


@router.get("/stats")
async def get_transaction_stats(log: Optional[UUID] = None, session: AsyncSession = Depends(get_session)):
    return success_response(await transaction_stats(session, log))


@router.get("/{transaction_id}")
async def get_transaction(transaction_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_transaction_or_404(session, transaction_id))


@router.put("/{transaction_id}")
async def put_transaction(
    transaction_id: UUID, payload: TransactionUpdate, session: AsyncSession = Depends(get_session)
):
    transaction = await update_transaction(session, transaction_id, payload)
    return success_response(transaction, message="Transaction updated successfully")


@router.delete("/{transaction_id}")
async def remove_transaction(transaction_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_transaction(session, transaction_id)
    return success_response({"id": deleted_id}, message="Transaction deleted successfully")
