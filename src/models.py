import threading
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    APPLIED = "applied"
    ACCOUNT_LOCKED = "account_locked"
    MISSING_AMOUNT = "missing_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_DISPUTABLE = "not_disputable"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"

    @property
    def applied(self) -> bool:
        return self is ProcessingResult.APPLIED


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class HeldTransaction:
    """A past deposit or withdrawal kept on the account so it can be disputed."""

    transaction_id: int
    transaction_type: TransactionType
    amount: Decimal
    disputed: bool = False


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


class ProcessingStats:
    """Thread-safe counters of transaction outcomes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: Counter = Counter()

    def record(self, result: ProcessingResult) -> None:
        with self._lock:
            self._counts[result] += 1

    def count(self, result: ProcessingResult) -> int:
        with self._lock:
            return self._counts[result]

    @property
    def processed(self) -> int:
        return self.count(ProcessingResult.APPLIED)

    @property
    def rejected(self) -> int:
        with self._lock:
            return sum(n for result, n in self._counts.items() if not result.applied)

    def as_dict(self) -> Dict[str, int]:
        with self._lock:
            return {result.value: n for result, n in self._counts.items()}
