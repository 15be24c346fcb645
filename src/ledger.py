import logging
from typing import Iterator, Optional

import dispute_validator
from amount import Amount
from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats, AccountSnapshot
from state_manager import StateManager

logger = logging.getLogger(__name__)


class Ledger:
    """
    Applies transactions, in input order, to per-client accounts.

    Every rejected transaction is a no-op: handlers check all preconditions
    before touching an account, so state is either fully updated or left as
    it was. Rejections are logged and counted, never raised.
    """

    def __init__(self):
        self._state = StateManager()
        self.stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> None:
        """Apply a single validated transaction."""
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                result = self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                result = self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                result = self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                result = self._handle_chargeback(transaction)
            case _:
                logger.warning(f"Tx {transaction.transaction_id}: unrecognized transaction type, ignoring")
                result = ProcessingResult.REJECTED

        self.stats.record(result)

    def snapshot(self) -> Iterator[AccountSnapshot]:
        """Read-only view of every account created so far, in no particular order."""
        for account in self._state.iter_accounts():
            yield account.snapshot()

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        amount = self._require_amount(transaction)

        if self._reuses_disputed_id(transaction):
            return ProcessingResult.REJECTED

        account = self._state.get_account(transaction.client_id)
        if account is not None and account.locked:
            logger.warning(f"Deposit tx {transaction.transaction_id}: account {transaction.client_id} is locked")
            return ProcessingResult.REJECTED

        account = self._state.create_account(transaction.client_id)
        account.credit(amount)
        self._state.store_transaction(transaction)
        return self._applied(account)

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        amount = self._require_amount(transaction)

        if self._reuses_disputed_id(transaction):
            return ProcessingResult.REJECTED

        account = self._usable_account(transaction)
        if account is None:
            return ProcessingResult.REJECTED

        if amount > account.available:
            logger.info(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {amount})"
            )
            return ProcessingResult.REJECTED

        account.debit(amount)
        self._state.store_transaction(transaction)
        return self._applied(account)

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        amount = dispute_validator.validate(self._state, transaction, TransactionType.DISPUTE)
        if amount is None:
            return ProcessingResult.REJECTED

        if amount.is_zero():
            logger.info(f"Dispute for tx {transaction.transaction_id}: zero amount, nothing to hold")
            return ProcessingResult.REJECTED

        account = self._usable_account(transaction)
        if account is None:
            return ProcessingResult.REJECTED

        account.hold(amount)
        self._state.open_dispute(transaction.transaction_id, amount)
        return self._applied(account)

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        if dispute_validator.validate(self._state, transaction, TransactionType.RESOLVE) is None:
            return ProcessingResult.REJECTED

        account = self._usable_account(transaction)
        if account is None:
            return ProcessingResult.REJECTED

        held = self._state.get_disputed_amount(transaction.transaction_id)
        account.release_hold(held)
        self._state.close_dispute(transaction.transaction_id)
        return self._applied(account)

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        if dispute_validator.validate(self._state, transaction, TransactionType.CHARGEBACK) is None:
            return ProcessingResult.REJECTED

        account = self._usable_account(transaction)
        if account is None:
            return ProcessingResult.REJECTED

        held = self._state.get_disputed_amount(transaction.transaction_id)
        account.remove_held(held)
        account.lock()
        self._state.close_dispute(transaction.transaction_id)
        logger.info(f"Chargeback for tx {transaction.transaction_id}: account {account.client_id} locked")
        return self._applied(account)

    def _usable_account(self, transaction: Transaction) -> Optional[ClientAccount]:
        """Existing, unlocked account for the transaction's client, or None after logging why not."""
        action = transaction.transaction_type.value.capitalize()
        account = self._state.get_account(transaction.client_id)
        if account is None:
            logger.warning(f"{action} tx {transaction.transaction_id}: unknown client {transaction.client_id}")
            return None
        if account.locked:
            logger.warning(f"{action} tx {transaction.transaction_id}: account {transaction.client_id} is locked")
            return None
        return account

    def _reuses_disputed_id(self, transaction: Transaction) -> bool:
        # An id under dispute cannot be replaced until it is resolved or charged back.
        if self._state.is_transaction_disputed(transaction.transaction_id):
            action = transaction.transaction_type.value.capitalize()
            logger.warning(f"{action} tx {transaction.transaction_id}: id belongs to a transaction under dispute")
            return True
        return False

    @staticmethod
    def _require_amount(transaction: Transaction) -> Amount:
        # Ingestion guarantees an amount on deposits and withdrawals.
        if transaction.amount is None:
            raise ValueError(f"{transaction!r} has no amount")
        return transaction.amount

    @staticmethod
    def _applied(account: ClientAccount) -> ProcessingResult:
        account.check_invariants()
        return ProcessingResult.APPLIED
