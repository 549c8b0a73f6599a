"""Balance transitions for the shop's banking ledger.

``evaluate`` is a pure function: given the balances after the latest
transaction and a requested transaction it either raises a
:class:`~shop_banking.core.errors.LedgerValidationError` or returns the
resolved charge and the balances that follow. Reading the latest snapshot and
appending the result are the caller's job.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ..core.errors import (
    BelowMinimumTransferAmountError,
    InsufficientFundsError,
    InvalidKindError,
    InvalidPaymentMethodError,
    MissingCounterpartyError,
    NegativeChargeError,
    NonPositiveAmountError,
)
from ..models import LedgerState, PaymentMethod, TransactionKind, TransactionRequest


# Ledger transfers credit the wallet with the transferred amount plus the
# charge, and the default charge is a cost of 5 rather than revenue.
TRANSFER_FEE = Decimal("5")
MINIMUM_TRANSFER_AMOUNT = Decimal("5")
ZERO = Decimal("0")


@dataclass(frozen=True)
class EvaluatedTransaction:
    kind: TransactionKind
    amount: Decimal
    charge: Decimal
    state: LedgerState
    payment_method: Optional[PaymentMethod] = None
    counterparty_id: Optional[UUID] = None
    note: Optional[str] = None

    @property
    def profit(self) -> Decimal:
        return self.charge


def _parse_kind(value: object) -> TransactionKind:
    try:
        return TransactionKind(value)
    except ValueError as exc:
        raise InvalidKindError("Invalid transaction type") from exc


def _validate(request: TransactionRequest) -> tuple[TransactionKind, Optional[PaymentMethod]]:
    kind = _parse_kind(request.kind)

    if request.amount <= ZERO:
        raise NonPositiveAmountError("Amount must be positive")

    if kind is TransactionKind.BORROWING and request.counterparty_id is None:
        raise MissingCounterpartyError("Employee ID required for borrowing")

    payment_method = None
    if kind is TransactionKind.WITHDRAWAL:
        try:
            payment_method = PaymentMethod(request.payment_method)
        except ValueError as exc:
            raise InvalidPaymentMethodError(
                "Payment method must be paynearby or online for withdrawal"
            ) from exc
    elif request.payment_method:
        raise InvalidPaymentMethodError("Payment method only applies to withdrawals")

    if request.charge is not None:
        if kind is TransactionKind.LEDGER_TRANSFER:
            if request.charge < -TRANSFER_FEE:
                raise NegativeChargeError(
                    f"Charge cannot be below -{TRANSFER_FEE} for a ledger transfer"
                )
        elif request.charge < ZERO:
            raise NegativeChargeError("Charge cannot be negative")

    if kind is TransactionKind.LEDGER_TRANSFER and request.amount < MINIMUM_TRANSFER_AMOUNT:
        raise BelowMinimumTransferAmountError(
            f"Amount must be at least {MINIMUM_TRANSFER_AMOUNT} to cover transfer charge"
        )

    return kind, payment_method


def resolve_charge(
    kind: TransactionKind, amount: Decimal, override: Optional[Decimal] = None
) -> Decimal:
    if kind is TransactionKind.BORROWING:
        return ZERO
    if override is not None:
        return override
    if kind is TransactionKind.LEDGER_TRANSFER:
        return -TRANSFER_FEE
    # Per-1000 form kept as written and unrounded; it reads like the start of a
    # banded fee schedule that was never finished.
    return (amount / 1000) * 10


def _apply(
    current: LedgerState,
    kind: TransactionKind,
    amount: Decimal,
    charge: Decimal,
    payment_method: Optional[PaymentMethod],
) -> LedgerState:
    cash, ledger, wallet = current.cash, current.ledger, current.wallet

    if kind is TransactionKind.DEPOSIT:
        if wallet < amount:
            raise InsufficientFundsError("Insufficient online wallet balance for deposit")
        return LedgerState(cash=cash + amount + charge, ledger=ledger, wallet=wallet - amount)

    if kind is TransactionKind.WITHDRAWAL:
        projected_cash = cash - amount + charge
        if projected_cash < ZERO:
            raise InsufficientFundsError("Insufficient cash balance for withdrawal")
        if payment_method is PaymentMethod.PAYNEARBY:
            ledger += amount
        else:
            wallet += amount
        return LedgerState(cash=projected_cash, ledger=ledger, wallet=wallet)

    if kind is TransactionKind.BORROWING:
        if cash < amount:
            raise InsufficientFundsError("Insufficient cash balance for borrowing")
        return LedgerState(cash=cash - amount, ledger=ledger, wallet=wallet)

    if ledger < amount:
        raise InsufficientFundsError("Insufficient ledger balance for transfer")
    return LedgerState(cash=cash, ledger=ledger - amount, wallet=wallet + amount + charge)


def evaluate(current: LedgerState, request: TransactionRequest) -> EvaluatedTransaction:
    kind, payment_method = _validate(request)
    charge = resolve_charge(kind, request.amount, request.charge)
    state = _apply(current, kind, request.amount, charge, payment_method)
    return EvaluatedTransaction(
        kind=kind,
        amount=request.amount,
        charge=charge,
        state=state,
        payment_method=payment_method,
        counterparty_id=request.counterparty_id if kind is TransactionKind.BORROWING else None,
        note=request.note,
    )
