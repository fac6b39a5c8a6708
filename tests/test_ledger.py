import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import Ledger
from models import ProcessingResult, Transaction, TransactionType


def make_transaction(transaction_type: TransactionType, client_id: int, transaction_id: int, amount=None) -> Transaction:
    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=Decimal(amount) if amount is not None else None,
    )


class TestLedger:
    def setup_method(self):
        self.ledger = Ledger()

    def test_deposit_creates_account(self):
        result = self.ledger.process(make_transaction(TransactionType.DEPOSIT, 1, 1, "2.5"))

        assert result == ProcessingResult.APPLIED
        account = self.ledger.get_account(1)
        assert account.available == Decimal("2.5")
        assert account.held == Decimal("0")
        assert len(self.ledger) == 1

    def test_non_deposit_does_not_create_account(self):
        for transaction in (
            make_transaction(TransactionType.WITHDRAWAL, 2, 4, "1.5"),
            make_transaction(TransactionType.DISPUTE, 2, 4),
            make_transaction(TransactionType.RESOLVE, 2, 4),
            make_transaction(TransactionType.CHARGEBACK, 2, 4),
        ):
            assert self.ledger.process(transaction) == ProcessingResult.REJECTED

        assert self.ledger.get_account(2) is None
        assert self.ledger.snapshot() == []

    def test_deposit_without_amount_is_rejected(self):
        result = self.ledger.process(make_transaction(TransactionType.DEPOSIT, 1, 1))

        assert result == ProcessingResult.REJECTED
        assert self.ledger.get_account(1) is None

    def test_dispute_with_amount_never_reaches_account(self):
        self.ledger.process(make_transaction(TransactionType.DEPOSIT, 1, 1, "10"))
        result = self.ledger.process(make_transaction(TransactionType.DISPUTE, 1, 1, "4"))

        assert result == ProcessingResult.REJECTED
        account = self.ledger.get_account(1)
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")
        assert not account.deposits.is_disputed(1)

    def test_dispute_of_other_clients_transaction_ignored(self):
        self.ledger.process(make_transaction(TransactionType.DEPOSIT, 1, 1, "3.5"))
        self.ledger.process(make_transaction(TransactionType.DEPOSIT, 2, 2, "4"))

        result = self.ledger.process(make_transaction(TransactionType.DISPUTE, 1, 2))

        assert result == ProcessingResult.IGNORED
        assert self.ledger.get_account(1).held == Decimal("0")
        assert self.ledger.get_account(2).held == Decimal("0")
        assert self.ledger.get_account(2).available == Decimal("4")

    def test_clients_are_independent(self):
        self.ledger.process_all([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "100"),
            make_transaction(TransactionType.DEPOSIT, 2, 2, "50"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.CHARGEBACK, 1, 1),
            make_transaction(TransactionType.DEPOSIT, 2, 3, "5"),
        ])

        assert self.ledger.get_account(1).locked is True
        assert self.ledger.get_account(2).locked is False
        assert self.ledger.get_account(2).available == Decimal("55")

    def test_order_matters(self):
        dispute_first = Ledger()
        dispute_first.process_all([
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.DEPOSIT, 1, 1, "100"),
        ])

        deposit_first = Ledger()
        deposit_first.process_all([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "100"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
        ])

        assert dispute_first.get_account(1).available == Decimal("100")
        assert dispute_first.get_account(1).held == Decimal("0")
        assert deposit_first.get_account(1).available == Decimal("0")
        assert deposit_first.get_account(1).held == Decimal("100")

    def test_dispute_before_its_deposit_is_not_retried(self):
        self.ledger.process_all([
            make_transaction(TransactionType.DEPOSIT, 1, 2, "1"),
            make_transaction(TransactionType.DISPUTE, 1, 5),
            make_transaction(TransactionType.DEPOSIT, 1, 5, "9"),
        ])

        account = self.ledger.get_account(1)
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")

    def test_locked_account_after_chargeback_scenario(self):
        self.ledger.process_all([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "3.0000"),
            make_transaction(TransactionType.WITHDRAWAL, 1, 2, "2.0000"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.CHARGEBACK, 1, 1),
            make_transaction(TransactionType.DEPOSIT, 1, 3, "100"),
        ])

        (status,) = self.ledger.snapshot()
        assert status.available == Decimal("-2.0000")
        assert status.held == Decimal("0.0000")
        assert status.total == Decimal("-2.0000")
        assert status.locked is True

    def test_total_is_always_available_plus_held(self):
        transactions = [
            make_transaction(TransactionType.DEPOSIT, 1, 1, "10.1234"),
            make_transaction(TransactionType.DEPOSIT, 2, 2, "7"),
            make_transaction(TransactionType.WITHDRAWAL, 1, 3, "4.0001"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.DISPUTE, 2, 2),
            make_transaction(TransactionType.RESOLVE, 1, 1),
            make_transaction(TransactionType.CHARGEBACK, 2, 2),
            make_transaction(TransactionType.WITHDRAWAL, 2, 4, "1"),
        ]
        for transaction in transactions:
            self.ledger.process(transaction)
            for status in self.ledger.snapshot():
                assert status.total == status.available + status.held

    def test_stats_count_every_result(self):
        stats = self.ledger.process_all([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "10"),
            make_transaction(TransactionType.WITHDRAWAL, 1, 2, "20"),
            make_transaction(TransactionType.WITHDRAWAL, 9, 3, "1"),
        ])

        assert stats.applied == 1
        assert stats.ignored == 1
        assert stats.rejected == 1

    def test_snapshot_one_status_per_client(self):
        self.ledger.process_all([
            make_transaction(TransactionType.DEPOSIT, 3, 1, "1"),
            make_transaction(TransactionType.DEPOSIT, 1, 2, "2"),
            make_transaction(TransactionType.DEPOSIT, 3, 3, "3"),
        ])

        statuses = {status.client_id: status for status in self.ledger.snapshot()}
        assert set(statuses) == {1, 3}
        assert statuses[3].available == Decimal("4")
