from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ..core.errors import (
    ConcurrentLedgerUpdateError,
    DuplicateIdempotencyKeyError,
    LedgerValidationError,
    UserNotFoundError,
)
from ..models import (
    BankingTransactionModel,
    CounterpartySummary,
    LedgerState,
    TransactionRecordResponse,
    TransactionRequest,
    UserModel,
)
from .evaluator import evaluate
from .repository import LedgerRepository


logger = logging.getLogger(__name__)

TRANSACTION_ROUTE = "banking_transaction"


class LedgerService:
    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _json_default(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, UUID):
            return str(value)
        return str(value)

    def _serialize(self, payload: Any) -> str:
        if hasattr(payload, "model_dump"):
            data = payload.model_dump(mode="json")
        else:
            data = payload
        return json.dumps(data, default=self._json_default, sort_keys=True)

    def _encode_signature(self, signature: Tuple[Any, ...]) -> str:
        return json.dumps(signature, default=self._json_default, sort_keys=True)

    def _request_signature(self, payload: TransactionRequest) -> Tuple[Any, ...]:
        data = payload.model_dump(mode="json")
        # 500 and 500.0 are the same request.
        for field in ("amount", "charge"):
            value = getattr(payload, field)
            if value is not None:
                data[field] = str(value.normalize())
        return (TRANSACTION_ROUTE, data)

    def _deserialize_record(self, payload: str) -> TransactionRecordResponse:
        return TransactionRecordResponse.model_validate(json.loads(payload))

    def _check_idempotency(
        self,
        idempotency_key: str,
        request_signature: Tuple[Any, ...],
    ) -> Optional[str]:
        record = self.repository.fetch_idempotency(TRANSACTION_ROUTE, idempotency_key)
        if record is None:
            return None

        signature = self._encode_signature(request_signature)
        if record.request_signature != signature:
            raise DuplicateIdempotencyKeyError(
                "Idempotency key was previously used with different parameters"
            )

        return record.response_payload

    def _record_idempotent(
        self,
        idempotency_key: str,
        request_signature: Tuple[Any, ...],
        response_payload: Any,
    ) -> None:
        self.repository.save_idempotency(
            route=TRANSACTION_ROUTE,
            key=idempotency_key,
            signature=self._encode_signature(request_signature),
            payload=self._serialize(response_payload),
        )

    def _state_of(self, record: Optional[BankingTransactionModel]) -> LedgerState:
        if record is None:
            return LedgerState.zero()
        return LedgerState(cash=record.cash, ledger=record.ledger, wallet=record.wallet)

    def _get_counterparty(self, user_id: UUID) -> UserModel:
        user = self.repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def _record_to_response(
        self,
        record: BankingTransactionModel,
        counterparty: Optional[UserModel] = None,
    ) -> TransactionRecordResponse:
        return TransactionRecordResponse(
            id=record.id,
            sequence=record.sequence,
            created_at=record.created_at,
            kind=record.kind,
            amount=record.amount,
            charge=record.charge,
            profit=record.profit,
            payment_method=record.payment_method,
            counterparty_id=record.counterparty_id,
            counterparty=(
                CounterpartySummary(
                    id=counterparty.id,
                    name=counterparty.name,
                    email=counterparty.email,
                    role=counterparty.role,
                )
                if counterparty is not None
                else None
            ),
            note=record.note,
            balances=self._state_of(record),
        )

    @staticmethod
    def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
        # Timestamps are stored as naive UTC; naive bounds are taken to be UTC.
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def current_balance(self) -> LedgerState:
        return self._state_of(self.repository.latest_transaction())

    def record_transaction(
        self,
        payload: TransactionRequest,
        idempotency_key: Optional[str] = None,
    ) -> TransactionRecordResponse:
        request_signature = self._request_signature(payload)
        if idempotency_key is not None:
            cached = self._check_idempotency(idempotency_key, request_signature)
            if cached is not None:
                logger.info(
                    "idempotent.banking_transaction.hit",
                    extra={"idempotency_key": idempotency_key},
                )
                return self._deserialize_record(cached)

        latest = self.repository.latest_transaction()
        try:
            evaluated = evaluate(self._state_of(latest), payload)
        except LedgerValidationError as exc:
            logger.info(
                "banking.transaction.rejected",
                extra={"kind": payload.kind, "amount": str(payload.amount), "code": exc.code},
            )
            raise

        counterparty = None
        if evaluated.counterparty_id is not None:
            counterparty = self._get_counterparty(evaluated.counterparty_id)

        sequence = latest.sequence + 1 if latest is not None else 1
        try:
            record = self.repository.add_transaction(sequence=sequence, evaluated=evaluated)
            response = self._record_to_response(record, counterparty)
            if idempotency_key is not None:
                self._record_idempotent(idempotency_key, request_signature, response)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning(
                "banking.transaction.conflict",
                extra={"sequence": sequence, "kind": evaluated.kind.value},
            )
            raise ConcurrentLedgerUpdateError(
                "Balances changed while the transaction was being recorded; "
                "reload and resubmit"
            ) from exc

        logger.info(
            "banking.transaction.created",
            extra={
                "transaction_id": str(response.id),
                "sequence": response.sequence,
                "kind": response.kind.value,
                "amount": str(response.amount),
                "charge": str(response.charge),
                "cash": str(response.balances.cash),
                "ledger": str(response.balances.ledger),
                "wallet": str(response.balances.wallet),
                "main": str(response.balances.main),
            },
        )
        return response

    def list_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TransactionRecordResponse]:
        # A single bound is ignored; the range only applies when both are given.
        if start is None or end is None:
            start = end = None
        else:
            start, end = self._as_naive_utc(start), self._as_naive_utc(end)
            if start > end:
                raise ValueError("start must not be after end")

        rows = self.repository.list_transactions(start=start, end=end)
        return [self._record_to_response(record, user) for record, user in rows]
