import math
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException
from loguru import logger
from sqlmodel import Field, SQLModel, col, delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.models import INFLOW_TYPES, OUTFLOW_TYPES, Event, Transaction, TransactionMethod, TransactionType
from emma.services.common import OptionalId, apply_changes, get_or_404

LABEL = "Transaction"


class TransactionEntry(SQLModel):
    """A transaction as posted in bulk, where the log comes from the query string."""

    model_config = {"use_enum_values": True}

    payor_person_id: OptionalId = None
    payor_name: Optional[str] = None
    payee_person_id: OptionalId = None
    payee_name: Optional[str] = None
    type: TransactionType
    name: str = Field(min_length=1)
    details: Optional[str] = None
    data: Optional[Any] = None
    amount: int = Field(gt=0)
    method: TransactionMethod
    ordering: int = Field(gt=0)
    happened_at: Optional[datetime] = None


class TransactionCreate(TransactionEntry):
    log_id: UUID


class TransactionUpdate(SQLModel):
    model_config = {"use_enum_values": True}

    log_id: UUID = None
    payor_person_id: OptionalId = None
    payor_name: Optional[str] = None
    payee_person_id: OptionalId = None
    payee_name: Optional[str] = None
    type: TransactionType = None
    name: str = Field(default=None, min_length=1)
    details: Optional[str] = None
    data: Optional[Any] = None
    amount: int = Field(default=None, gt=0)
    method: TransactionMethod = None
    ordering: int = Field(default=None, gt=0)
    happened_at: Optional[datetime] = None


async def list_transactions(session: AsyncSession, log: Optional[UUID] = None) -> List[Transaction]:
    statement = select(Transaction)
    if log is not None:
        statement = statement.where(Transaction.log_id == log).order_by(Transaction.ordering)
    else:
        statement = statement.order_by(col(Transaction.created_at).desc())
    result = await session.exec(statement)
    return result.all()


async def get_transaction_or_404(session: AsyncSession, transaction_id: UUID) -> Transaction:
    return await get_or_404(session, Transaction, transaction_id, LABEL)


def _build(entry: TransactionEntry, log: Optional[UUID] = None) -> Transaction:
    data = entry.model_dump(exclude_none=True)
    if log is not None:
        data["log_id"] = log
    return Transaction(**data)


async def create_transaction(session: AsyncSession, payload: TransactionCreate) -> Transaction:
    transaction = _build(payload)
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)
    logger.info("Created transaction {} in log {}", transaction.id, transaction.log_id)
    return transaction


async def create_transactions(session: AsyncSession, log: UUID, entries: List[TransactionEntry]) -> List[Transaction]:
    transactions = [_build(entry, log) for entry in entries]
    session.add_all(transactions)
    await session.commit()
    for transaction in transactions:
        await session.refresh(transaction)
    logger.info("Created {} transactions in log {}", len(transactions), log)
    return transactions


async def replace_transactions(session: AsyncSession, log: Optional[UUID], entries: List[TransactionEntry]) -> List[Transaction]:
    """Swap every transaction of ``log`` for ``entries``."""
    if log is None:
        raise HTTPException(status_code=400, detail="Bulk update requires log parameter")
    await session.exec(delete(Transaction).where(Transaction.log_id == log))
    transactions = [_build(entry, log) for entry in entries]
    session.add_all(transactions)
    await session.commit()
    for transaction in transactions:
        await session.refresh(transaction)
    logger.info("Replaced transactions in log {} with {} entries", log, len(transactions))
    return transactions


async def update_transaction(session: AsyncSession, transaction_id: UUID, payload: TransactionUpdate) -> Transaction:
    transaction = await get_transaction_or_404(session, transaction_id)
    apply_changes(transaction, payload.model_dump(exclude_unset=True))
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)
    logger.info("Updated transaction {}", transaction_id)
    return transaction


async def delete_transaction(session: AsyncSession, transaction_id: UUID) -> UUID:
    transaction = await get_transaction_or_404(session, transaction_id)
    await session.delete(transaction)
    await session.commit()
    logger.info("Deleted transaction {}", transaction_id)
    return transaction_id


def _expected_payments(event: Event, transactions: List[Transaction]) -> Dict[str, int]:
    # A capacity of 0 falls back to the committed head count.
    staff_heads = event.staff_capacity or len(event.committed_staff or [])
    participant_heads = event.participant_capacity or len(event.committed_participants or [])
    expected_staff = staff_heads * (event.staff_cost or 0)
    expected_participants = participant_heads * (event.participant_cost or 0)
    collected = sum(t.amount for t in transactions if t.type == TransactionType.PAYMENT.value)
    total_expected = expected_staff + expected_participants
    return {
        "expected_staff_payments": expected_staff,
        "expected_participant_payments": expected_participants,
        "total_expected_payments": total_expected,
        "collected_payments": collected,
        "remaining_payments": max(0, total_expected - collected),
    }


def summarize_transactions(transactions: List[Transaction], event: Optional[Event] = None) -> dict:
    """Financial summary of a set of transactions.

    Payments and reimbursements count as inflows, refunds and expenses as
    outflows. ``active``/``inactive`` mirror the payment and refund counts so
    the shape matches the other stats endpoints. ``payments`` is only
    present when the transactions belong to an event's log.
    """
    total = len(transactions)
    by_type = {kind.value: 0 for kind in TransactionType}
    by_method: Dict[str, int] = {}
    by_payor: Dict[str, Dict[str, int]] = {}
    inflows = outflows = 0

    for t in transactions:
        by_type[t.type] = by_type.get(t.type, 0) + 1
        by_method[t.method] = by_method.get(t.method, 0) + 1
        if t.type in INFLOW_TYPES:
            inflows += t.amount
            payor = str(t.payor_person_id) if t.payor_person_id else (t.payor_name or "Unknown")
            entry = by_payor.setdefault(payor, {"count": 0, "total": 0})
            entry["count"] += 1
            entry["total"] += t.amount
        elif t.type in OUTFLOW_TYPES:
            outflows += t.amount

    total_amount = inflows - outflows
    stats = {
        "active": by_type[TransactionType.PAYMENT.value],
        "inactive": by_type[TransactionType.REFUND.value],
        "total": total,
        "financial": {
            "total_amount": total_amount,
            "total_inflows": inflows,
            "total_outflows": outflows,
            "average_transaction_size": math.floor(total_amount / total + 0.5) if total else 0,
            "net_amount": inflows - outflows,
        },
        "by_type": by_type,
        "by_method": by_method,
        "by_payor": by_payor,
    }
    if event is not None:
        stats["payments"] = _expected_payments(event, transactions)
    return stats


async def transaction_stats(session: AsyncSession, log: Optional[UUID] = None) -> dict:
    statement = select(Transaction)
    event = None
    if log is not None:
        statement = statement.where(Transaction.log_id == log)
        result = await session.exec(select(Event).where(Event.transaction_log_id == log))
        event = result.first()
    result = await session.exec(statement)
    return summarize_transactions(list(result.all()), event)
