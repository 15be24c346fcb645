import logging
from typing import Optional

from amount import Amount
from models import Transaction, TransactionType
from state_manager import StateManager

logger = logging.getLogger(__name__)


def validate(state: StateManager, transaction: Transaction, expected_type: TransactionType) -> Optional[Amount]:
    """
    Decide whether a dispute, resolve or chargeback may act on the
    transaction it references.

    Returns the referenced transaction's original amount, or None if the
    request must be rejected. Never mutates state.
    """
    action = expected_type.value
    stored = state.get_transaction(transaction.transaction_id)

    if stored is None:
        logger.warning(f"{action.capitalize()} for tx {transaction.transaction_id}: transaction not found")
        return None

    if expected_type == TransactionType.DISPUTE and stored.disputed:
        logger.warning(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
        return None

    if expected_type in (TransactionType.RESOLVE, TransactionType.CHARGEBACK) and not stored.disputed:
        logger.warning(f"{action.capitalize()} for tx {transaction.transaction_id}: transaction is not under dispute")
        return None

    if stored.client_id != transaction.client_id:
        logger.error(
            f"{action.capitalize()} for tx {transaction.transaction_id}: client mismatch "
            f"(expected {stored.client_id}, got {transaction.client_id})"
        )
        return None

    return stored.amount
