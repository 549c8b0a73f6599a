from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import Operation, PaymentMethod, TransactionKind, UserRole

class LedgerState(BaseModel):
    """The three tracked balances; ``main`` is always derived from them."""

    model_config = ConfigDict(frozen=True)

    cash: Decimal = Decimal("0")
    ledger: Decimal = Decimal("0")
    wallet: Decimal = Decimal("0")

    @computed_field
    @property
    def main(self) -> Decimal:
        return self.cash + self.ledger + self.wallet

    @classmethod
    def zero(cls) -> "LedgerState":
        return cls()

class TransactionRequest(BaseModel):
    # Left untyped so the evaluator reports a missing or unknown kind or
    # payment method with its own error instead of a schema error.
    kind: Optional[Any] = Field(default=None, description="deposit, withdrawal, borrowing or ledger_transfer")
    # Four places keep the default fee (amount / 100) within the stored scale of six.
    amount: Decimal = Field(..., max_digits=18, decimal_places=4)
    charge: Optional[Decimal] = Field(
        default=None,
        max_digits=18,
        decimal_places=4,
        description="Explicit charge replacing the default fee",
    )
    payment_method: Optional[Any] = Field(default=None, description="paynearby or online, withdrawals only")
    counterparty_id: Optional[UUID] = Field(default=None, description="Employee borrowing the cash")
    note: Optional[str] = Field(default=None, description="Narrative to display in the history")

class CounterpartySummary(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole

class TransactionRecordResponse(BaseModel):
    id: UUID
    sequence: int
    created_at: datetime
    kind: TransactionKind
    amount: Decimal
    charge: Decimal
    profit: Decimal
    payment_method: Optional[PaymentMethod] = None
    counterparty_id: Optional[UUID] = None
    counterparty: Optional[CounterpartySummary] = None
    note: Optional[str] = None
    balances: LedgerState

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    role: UserRole
    phone: Optional[str] = None

class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = None

class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    created_at: datetime

class OperationGrantItem(BaseModel):
    operation: Operation
    allowed: bool = False

class GrantsUpdate(BaseModel):
    operations: list[OperationGrantItem]

class OperationGrantResponse(BaseModel):
    employee_id: UUID
    operation: Operation
    allowed: bool
    granted_by: Optional[UUID] = None
