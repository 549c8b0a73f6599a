from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlmodel import Session, select

from ..models import (
    BankingTransactionModel,
    IdempotencyRecordModel,
    Operation,
    OperationGrantModel,
    UserModel,
    UserRole,
)
from .evaluator import EvaluatedTransaction


class LedgerRepository:
    """Thin data access layer around the SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Users --------------------------------------------------------------
    def add_user(
        self,
        *,
        name: str,
        email: str,
        role: UserRole,
        phone: Optional[str] = None,
    ) -> UserModel:
        user = UserModel(name=name, email=email, role=role, phone=phone)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: UUID) -> Optional[UserModel]:
        return self.session.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.email == email)
        return self.session.exec(stmt).first()

    def list_users(self) -> list[UserModel]:
        stmt = select(UserModel).order_by(UserModel.created_at)
        return list(self.session.exec(stmt))

    def update_user(self, user: UserModel, changes: dict[str, object]) -> UserModel:
        for field, value in changes.items():
            setattr(user, field, value)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def delete_user(self, user: UserModel) -> None:
        for grant in self.list_grants(user.id):
            self.session.delete(grant)
        stmt = select(OperationGrantModel).where(OperationGrantModel.granted_by == user.id)
        for grant in list(self.session.exec(stmt)):
            grant.granted_by = None
            self.session.add(grant)
        self.session.delete(user)
        self.session.flush()

    # Operation grants ---------------------------------------------------
    def replace_grants(
        self,
        employee_id: UUID,
        grants: dict[Operation, bool],
        granted_by: UUID,
    ) -> list[OperationGrantModel]:
        for grant in self.list_grants(employee_id):
            self.session.delete(grant)
        self.session.flush()

        rows = [
            OperationGrantModel(
                employee_id=employee_id,
                operation=operation,
                allowed=allowed,
                granted_by=granted_by,
            )
            for operation, allowed in grants.items()
        ]
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def list_grants(self, employee_id: Optional[UUID] = None) -> list[OperationGrantModel]:
        stmt = select(OperationGrantModel)
        if employee_id is not None:
            stmt = stmt.where(OperationGrantModel.employee_id == employee_id)
        return list(self.session.exec(stmt))

    def has_allowed_grant(self, employee_id: UUID, operations: Iterable[Operation]) -> bool:
        stmt = (
            select(OperationGrantModel)
            .where(OperationGrantModel.employee_id == employee_id)
            .where(OperationGrantModel.operation.in_(list(operations)))
            .where(OperationGrantModel.allowed == True)  # noqa: E712
        )
        return self.session.exec(stmt).first() is not None

    # Banking transactions -----------------------------------------------
    def latest_transaction(self) -> Optional[BankingTransactionModel]:
        stmt = select(BankingTransactionModel).order_by(BankingTransactionModel.sequence.desc())
        return self.session.exec(stmt).first()

    def add_transaction(
        self,
        *,
        sequence: int,
        evaluated: EvaluatedTransaction,
    ) -> BankingTransactionModel:
        record = BankingTransactionModel(
            sequence=sequence,
            kind=evaluated.kind,
            amount=evaluated.amount,
            charge=evaluated.charge,
            profit=evaluated.profit,
            payment_method=evaluated.payment_method,
            counterparty_id=evaluated.counterparty_id,
            note=evaluated.note,
            cash=evaluated.state.cash,
            ledger=evaluated.state.ledger,
            wallet=evaluated.state.wallet,
        )
        self.session.add(record)
        self.session.flush()
        self.session.refresh(record)
        return record

    def has_transactions_for(self, user_id: UUID) -> bool:
        stmt = select(BankingTransactionModel).where(
            BankingTransactionModel.counterparty_id == user_id
        )
        return self.session.exec(stmt).first() is not None

    def list_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[tuple[BankingTransactionModel, Optional[UserModel]]]:
        stmt = select(BankingTransactionModel, UserModel).join(
            UserModel,
            BankingTransactionModel.counterparty_id == UserModel.id,
            isouter=True,
        )
        if start is not None:
            stmt = stmt.where(BankingTransactionModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(BankingTransactionModel.created_at <= end)
        stmt = stmt.order_by(BankingTransactionModel.sequence.desc())
        return [(record, user) for record, user in self.session.exec(stmt)]

    # Idempotency store --------------------------------------------------
    def fetch_idempotency(
        self, route: str, key: str
    ) -> Optional[IdempotencyRecordModel]:
        stmt = (
            select(IdempotencyRecordModel)
            .where(IdempotencyRecordModel.route == route)
            .where(IdempotencyRecordModel.key == key)
        )
        return self.session.exec(stmt).first()

    def save_idempotency(
        self,
        *,
        route: str,
        key: str,
        signature: str,
        payload: str,
    ) -> None:
        record = IdempotencyRecordModel(
            route=route,
            key=key,
            request_signature=signature,
            response_payload=payload,
        )
        self.session.add(record)
