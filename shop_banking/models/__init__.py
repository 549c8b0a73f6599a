from .db import BankingTransaction as BankingTransactionModel
from .db import IdempotencyRecord as IdempotencyRecordModel
from .db import OperationGrant as OperationGrantModel
from .db import User as UserModel
from .enums import Operation, PaymentMethod, TransactionKind, UserRole
from .schemas import (
    CounterpartySummary,
    GrantsUpdate,
    LedgerState,
    OperationGrantItem,
    OperationGrantResponse,
    TransactionRecordResponse,
    TransactionRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "CounterpartySummary",
    "GrantsUpdate",
    "LedgerState",
    "OperationGrantItem",
    "OperationGrantResponse",
    "TransactionRecordResponse",
    "TransactionRequest",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "Operation",
    "PaymentMethod",
    "TransactionKind",
    "UserRole",
    "BankingTransactionModel",
    "IdempotencyRecordModel",
    "OperationGrantModel",
    "UserModel",
]
