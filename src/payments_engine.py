import logging
from typing import Dict, Iterable

from csv_io import read_transactions
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Ledger engine: owns every client account and the transaction history.
    Transactions are applied strictly in the order given, one at a time, with no
    reordering or retries. Fatal errors (InvalidEvent, InvalidAmount) propagate
    and end the batch.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """Apply one transaction and return its outcome tag."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(result)
        if result.is_rejection:
            logger.debug(f"Rejected {transaction}: {result.value}")
        return result

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return final account states."""
        for transaction in transactions:
            self.apply(transaction)

        logger.info(f"Finished batch: {self._stats.processed} applied, {self._stats.rejected} rejected")
        return self.final_states()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        return self.process(read_transactions(filepath))

    def final_states(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()
