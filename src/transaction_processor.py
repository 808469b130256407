import logging

from amount import Amount
from errors import InvalidEvent
from models import (
    ClientAccount,
    DisputeState,
    HistoryEntry,
    ProcessingResult,
    Transaction,
    TransactionType,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to ledger state, one at a time, in arrival order.
    Returns a ProcessingResult naming the outcome; rejected transactions leave state untouched.
    Raises InvalidEvent for transactions that are structurally malformed.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            Any other value: Rejected for that reason, nothing changed
        """
        self._validate(transaction)

        account = self._state.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def _validate(self, transaction: Transaction) -> None:
        if not isinstance(transaction, Transaction):
            raise InvalidEvent(f"Expected a Transaction, got {type(transaction).__name__}")
        if not isinstance(transaction.transaction_type, TransactionType):
            raise InvalidEvent(f"Unknown transaction type {transaction.transaction_type!r}")

        for name in ("client_id", "transaction_id"):
            value = getattr(transaction, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidEvent(f"{transaction!r}: {name} must be a non-negative integer")

        if transaction.transaction_type.carries_amount and not isinstance(transaction.amount, Amount):
            raise InvalidEvent(f"{transaction!r}: {transaction.transaction_type.value} requires an amount")

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount.is_negative():
            logger.warning(f"Deposit tx {transaction.transaction_id}: negative amount {transaction.amount}")
            return ProcessingResult.NEGATIVE_AMOUNT

        if account.locked:
            logger.info(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        if self._state.has_transaction(transaction.transaction_id):
            logger.warning(f"Deposit tx {transaction.transaction_id}: transaction id already used")
            return ProcessingResult.DUPLICATE_TRANSACTION

        account.credit(transaction.amount)
        self._record(transaction)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount.is_negative():
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: negative amount {transaction.amount}")
            return ProcessingResult.NEGATIVE_AMOUNT

        if account.locked:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        if account.available < transaction.amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} available, {transaction.amount} requested)")
            return ProcessingResult.INSUFFICIENT_FUNDS

        if self._state.has_transaction(transaction.transaction_id):
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: transaction id already used")
            return ProcessingResult.DUPLICATE_TRANSACTION

        account.debit(transaction.amount)
        self._record(transaction)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if original.client_id != transaction.client_id:
            logger.warning(f"Dispute for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})")
            return ProcessingResult.CLIENT_MISMATCH

        # TODO: Withdrawal disputes (fraud claims) would need a recall of funds that already left the account
        if original.transaction_type != TransactionType.DEPOSIT:
            logger.warning(f"Dispute for tx {transaction.transaction_id}: only deposits can be disputed (got {original.transaction_type.value})")
            return ProcessingResult.NOT_DISPUTABLE

        if original.dispute_state == DisputeState.DISPUTED:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.ALREADY_DISPUTED

        if account.locked:
            logger.info(f"Dispute for tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        # available may go negative when the disputed funds were already spent
        account.hold(original.amount)
        original.dispute_state = DisputeState.DISPUTED
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._find_disputed(account, transaction)
        if rejection is not None:
            return rejection

        account.release_hold(original.amount)
        original.dispute_state = DisputeState.RESOLVED
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._find_disputed(account, transaction)
        if rejection is not None:
            return rejection

        account.remove_held(original.amount)
        account.locked = True
        original.dispute_state = DisputeState.CHARGED_BACK
        logger.info(f"Chargeback for tx {transaction.transaction_id}: account {account.client_id} locked")
        return ProcessingResult.SUCCESS

    def _find_disputed(self, account: ClientAccount, transaction: Transaction):
        """Look up the history entry a resolve/chargeback settles, or the reason it can't."""
        action = transaction.transaction_type.value.capitalize()
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            logger.info(f"{action} for tx {transaction.transaction_id}: transaction not found")
            return None, ProcessingResult.UNKNOWN_TRANSACTION

        if original.client_id != transaction.client_id:
            logger.warning(f"{action} for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})")
            return None, ProcessingResult.CLIENT_MISMATCH

        if account.locked:
            logger.info(f"{action} for tx {transaction.transaction_id}: account {account.client_id} is locked")
            return None, ProcessingResult.ACCOUNT_LOCKED

        if original.dispute_state != DisputeState.DISPUTED:
            logger.info(f"{action} for tx {transaction.transaction_id}: transaction not under dispute ({original.dispute_state.value})")
            return None, ProcessingResult.NOT_DISPUTED

        return original, None

    def _record(self, transaction: Transaction) -> None:
        self._state.record_transaction(
            transaction.transaction_id,
            HistoryEntry(
                client_id=transaction.client_id,
                amount=transaction.amount,
                transaction_type=transaction.transaction_type,
            ),
        )
