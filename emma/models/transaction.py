from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from .common import timestamp_field, utcnow


class TransactionType(str, Enum):
    PAYMENT = "Payment"
    REFUND = "Refund"
    EXPENSE = "Expense"
    REIMBURSEMENT = "Reimbursement"


class TransactionMethod(str, Enum):
    CASH = "Cash"
    CHECK = "Check"
    CREDIT = "Credit"
    DEBIT = "Debit"
    TRANSFER = "Transfer"
    OTHER = "Other"


INFLOW_TYPES = (TransactionType.PAYMENT.value, TransactionType.REIMBURSEMENT.value)
OUTFLOW_TYPES = (TransactionType.REFUND.value, TransactionType.EXPENSE.value)


class Transaction(SQLModel, table=True):
    __tablename__ = "transaction_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    log_id: UUID = Field(index=True)
    payor_person_id: Optional[UUID] = Field(
        default=None, foreign_key="people.id", ondelete="SET NULL"
    )
    payor_name: Optional[str] = None
    payee_person_id: Optional[UUID] = Field(
        default=None, foreign_key="people.id", ondelete="SET NULL"
    )
    payee_name: Optional[str] = None
    # plain text, one of TransactionType
    type: str
    name: str
    details: Optional[str] = None
    data: Optional[Any] = Field(default=None, sa_type=JSON)
    amount: int  # cents, always positive
    method: str  # one of TransactionMethod
    ordering: int
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
    happened_at: Optional[datetime] = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
