from decimal import Decimal

import pytest
from sqlmodel import Session, SQLModel, select

from ..core.db import create_engine_for_url
from ..core.errors import ConcurrentLedgerUpdateError, InsufficientFundsError
from ..models import BankingTransactionModel, TransactionRequest
from ..services import LedgerRepository, LedgerService


class StaleSnapshotRepository(LedgerRepository):
    """Pretends the latest row was never seen, like a writer that read too early."""

    def latest_transaction(self):
        return None


@pytest.fixture
def session(tmp_path):
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'service.db'}")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


def _count(session: Session) -> int:
    return len(list(session.exec(select(BankingTransactionModel))))


def test_empty_ledger_only_accepts_self_funded_withdrawal(session: Session) -> None:
    service = LedgerService(session)
    assert service.current_balance().main == 0

    with pytest.raises(InsufficientFundsError):
        service.record_transaction(TransactionRequest(kind="deposit", amount=Decimal("10")))

    record = service.record_transaction(
        TransactionRequest(
            kind="withdrawal",
            amount=Decimal("100"),
            payment_method="online",
            charge=Decimal("100"),
        )
    )
    assert record.sequence == 1
    assert record.balances.cash == 0
    assert record.balances.wallet == Decimal("100")
    assert service.current_balance().wallet == Decimal("100")


def test_stale_snapshot_cannot_overwrite_newer_row(session: Session) -> None:
    service = LedgerService(session)
    first = service.record_transaction(
        TransactionRequest(
            kind="withdrawal",
            amount=Decimal("50"),
            payment_method="paynearby",
            charge=Decimal("50"),
        )
    )
    assert first.balances.ledger == Decimal("50")

    stale = LedgerService(session, StaleSnapshotRepository(session))
    with pytest.raises(ConcurrentLedgerUpdateError):
        stale.record_transaction(
            TransactionRequest(
                kind="withdrawal",
                amount=Decimal("10"),
                payment_method="online",
                charge=Decimal("10"),
            )
        )

    assert _count(session) == 1
    assert service.current_balance().ledger == Decimal("50")
