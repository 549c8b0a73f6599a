from __future__ import annotations
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4
from sqlmodel import Field, SQLModel

from .enums import Operation, PaymentMethod, TransactionKind, UserRole

class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str
    email: str = Field(unique=True, index=True)
    role: UserRole
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

class OperationGrant(SQLModel, table=True):
    __tablename__ = "operation_grant"

    employee_id: UUID = Field(foreign_key="users.id", primary_key=True)
    operation: Operation = Field(primary_key=True)
    allowed: bool = False
    granted_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

class BankingTransaction(SQLModel, table=True):
    """One append-only ledger row carrying the balances after it was applied."""

    __tablename__ = "banking_transaction"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    # Unique so two writers that read the same snapshot cannot both append.
    sequence: int = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    kind: TransactionKind
    amount: Decimal = Field(max_digits=20, decimal_places=6)
    charge: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=6)
    profit: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=6)
    payment_method: Optional[PaymentMethod] = None
    counterparty_id: Optional[UUID] = Field(default=None, foreign_key="users.id", index=True)
    note: Optional[str] = None
    cash: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=6)
    ledger: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=6)
    wallet: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=6)

class IdempotencyRecord(SQLModel, table=True):
    __tablename__ = "idempotency_record"

    route: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    request_signature: str
    response_payload: str
