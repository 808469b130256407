import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from models import (
    ClientAccount,
    DisputeState,
    HistoryEntry,
    ProcessingResult,
    ProcessingStats,
    Transaction,
    TransactionType,
)


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Amount.from_decimal_string("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Amount(100)

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_carries_amount(self):
        assert TransactionType.DEPOSIT.carries_amount
        assert TransactionType.WITHDRAWAL.carries_amount
        assert not TransactionType.DISPUTE.carries_amount
        assert not TransactionType.RESOLVE.carries_amount
        assert not TransactionType.CHARGEBACK.carries_amount

    def test_repr(self):
        transaction = Transaction(TransactionType.DEPOSIT, 2, 7, Amount(1))
        assert repr(transaction) == "Transaction(deposit, client=2, tx=7, amount=1.0000)"


class TestHistoryEntry:
    def test_starts_undisputed(self):
        entry = HistoryEntry(client_id=1, amount=Amount(5), transaction_type=TransactionType.DEPOSIT)
        assert entry.dispute_state == DisputeState.NONE


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Amount.zero()
        assert account.held == Amount.zero()
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Amount(100),
            held=Amount(50),
        )
        assert account.total == Amount(150)

    def test_hold_and_release(self):
        account = ClientAccount(client_id=1, available=Amount(10))
        account.hold(Amount(4))
        assert account.available == Amount(6)
        assert account.held == Amount(4)
        assert account.total == Amount(10)

        account.release_hold(Amount(4))
        assert account.available == Amount(10)
        assert account.held == Amount.zero()

    def test_accounts_do_not_share_balances(self):
        first = ClientAccount(client_id=1)
        second = ClientAccount(client_id=2)
        first.credit(Amount(5))
        assert second.available == Amount.zero()


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.INSUFFICIENT_FUNDS.value == "insufficient_funds"
        assert ProcessingResult.NOT_DISPUTED.value == "not_disputed"

    def test_only_success_is_not_rejection(self):
        rejections = [result for result in ProcessingResult if result.is_rejection]
        assert ProcessingResult.SUCCESS not in rejections
        assert len(rejections) == len(ProcessingResult) - 1


class TestProcessingStats:
    def test_counts(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.SUCCESS)
        stats.record(ProcessingResult.SUCCESS)
        stats.record(ProcessingResult.ACCOUNT_LOCKED)
        stats.record(ProcessingResult.UNKNOWN_TRANSACTION)

        assert stats.processed == 2
        assert stats.rejected == 2
        assert stats.outcomes[ProcessingResult.ACCOUNT_LOCKED] == 1
