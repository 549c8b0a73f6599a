from .evaluator import EvaluatedTransaction, evaluate, resolve_charge
from .ledger import LedgerService
from .repository import LedgerRepository
from .staff import StaffService

__all__ = [
    "EvaluatedTransaction",
    "LedgerRepository",
    "LedgerService",
    "StaffService",
    "evaluate",
    "resolve_charge",
]
