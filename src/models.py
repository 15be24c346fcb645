from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from amount import Amount


class LedgerInvariantError(RuntimeError):
    """Raised when an account breaks total == available + held or held >= 0."""


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, text: str) -> "TransactionType":
        """Map input text to a member; anything unknown becomes UNRECOGNIZED."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNRECOGNIZED

    @property
    def is_monetary(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Amount] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """Transaction log entry: a deposit or withdrawal plus its dispute flag."""

    transaction: Transaction
    disputed: bool = False

    @property
    def client_id(self) -> int:
        return self.transaction.client_id

    @property
    def amount(self) -> Amount:
        return self.transaction.amount


class AccountSnapshot(NamedTuple):
    client_id: int
    available: Amount
    held: Amount
    total: Amount
    locked: bool


@dataclass
class ClientAccount:
    client_id: int
    available: Amount = field(default_factory=Amount.zero)
    held: Amount = field(default_factory=Amount.zero)
    total: Amount = field(default_factory=Amount.zero)
    locked: bool = False

    def credit(self, amount: Amount) -> None:
        self.available += amount
        self.total += amount

    def debit(self, amount: Amount) -> None:
        self.available -= amount
        self.total -= amount

    def hold(self, amount: Amount) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Amount) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Amount) -> None:
        self.held -= amount
        self.total -= amount

    def lock(self) -> None:
        self.locked = True

    def check_invariants(self) -> None:
        if self.total != self.available + self.held:
            raise LedgerInvariantError(
                f"client {self.client_id}: total {self.total} != available {self.available} + held {self.held}"
            )
        if self.held.is_negative():
            raise LedgerInvariantError(f"client {self.client_id}: negative held {self.held}")

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(self.client_id, self.available, self.held, self.total, self.locked)


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.ingestion_errors = 0

    def record(self, result: ProcessingResult):
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.rejected += 1

    def record_ingestion_error(self):
        self.ingestion_errors += 1
