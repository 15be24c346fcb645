from typing import Dict, Iterator, Optional, Set

from amount import Amount
from models import Transaction, ClientAccount, StoredTransaction


class StateManager:
    """
    In-memory ledger state: client accounts, the transaction log used for
    dispute lookups, and the amounts frozen by currently open disputes.
    Owned by a single Ledger; nothing else should hold a reference to it.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, StoredTransaction] = {}
        self._disputes: Dict[int, Amount] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account, or None if the client has never deposited."""
        return self._accounts.get(client_id)

    def create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: Transaction) -> None:
        """Store a deposit or withdrawal for future dispute lookups. Last write wins."""
        self._transactions[transaction.transaction_id] = StoredTransaction(transaction)

    def get_transaction(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def is_transaction_disputed(self, transaction_id: int) -> bool:
        """Check if transaction is currently disputed."""
        stored = self._transactions.get(transaction_id)
        return stored is not None and stored.disputed

    def open_dispute(self, transaction_id: int, amount: Amount) -> None:
        """Freeze amount under transaction_id and flag the log entry as disputed."""
        self._disputes[transaction_id] = amount
        self._transactions[transaction_id].disputed = True

    def get_disputed_amount(self, transaction_id: int) -> Optional[Amount]:
        return self._disputes.get(transaction_id)

    def close_dispute(self, transaction_id: int) -> None:
        """Clear dispute status for a transaction."""
        self._disputes.pop(transaction_id, None)
        self._transactions[transaction_id].disputed = False

    def iter_accounts(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def open_dispute_ids(self) -> Set[int]:
        """Ids with an amount frozen in the dispute log."""
        return set(self._disputes)

    def disputed_transaction_ids(self) -> Set[int]:
        """Ids whose transaction log entry is flagged as disputed."""
        return {transaction_id for transaction_id, stored in self._transactions.items() if stored.disputed}
