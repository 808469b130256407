from typing import Dict, Optional

from models import ClientAccount, HistoryEntry


class StateManager:
    """
    Owns the ledger state: one account per client and the history of accepted
    deposits and withdrawals, keyed by transaction id for dispute lookups.
    Single writer; nothing here is shared across threads.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._history: Dict[int, HistoryEntry] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = self._accounts[client_id] = ClientAccount(client_id=client_id)
        return account

    def record_transaction(self, transaction_id: int, entry: HistoryEntry) -> None:
        """Store an accepted deposit/withdrawal. Transaction ids are never reused."""
        if transaction_id in self._history:
            raise KeyError(f"Transaction {transaction_id} already recorded")
        self._history[transaction_id] = entry

    def get_transaction(self, transaction_id: int) -> Optional[HistoryEntry]:
        return self._history.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._history

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts in first-seen order (for final output)."""
        return dict(self._accounts)
