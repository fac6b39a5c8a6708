import threading
from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow, Rounded
from enum import Enum
from typing import Optional

# Balances are exact: any operation that would round raises instead.
MONEY_PRECISION = 64
MONEY_CONTEXT = Context(prec=MONEY_PRECISION, traps=[InvalidOperation, Inexact, Rounded, Overflow])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


AMOUNT_BEARING_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    REJECTED = "rejected"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def is_valid(self) -> bool:
        """Deposits and withdrawals carry an amount, every other kind must not."""
        has_amount = self.amount is not None
        return has_amount == (self.transaction_type in AMOUNT_BEARING_TYPES)

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A disputable transaction kept by an account. Only deposits are stored today."""

    amount: Decimal
    transaction_type: TransactionType = TransactionType.DEPOSIT
    state: DisputeState = DisputeState.NORMAL

    @property
    def disputed(self) -> bool:
        return self.state is DisputeState.DISPUTED

    def dispute(self) -> None:
        self.state = DisputeState.DISPUTED

    def undispute(self) -> None:
        self.state = DisputeState.NORMAL


@dataclass(frozen=True)
class AccountStatus:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self.ignored = 0
        self.rejected = 0

    def record(self, result: ProcessingResult) -> None:
        with self._lock:
            if result == ProcessingResult.APPLIED:
                self.applied += 1
            elif result == ProcessingResult.IGNORED:
                self.ignored += 1
            else:
                self.rejected += 1

    def merge(self, other: "ProcessingStats") -> None:
        with self._lock:
            self.applied += other.applied
            self.ignored += other.ignored
            self.rejected += other.rejected

    @property
    def total(self) -> int:
        return self.applied + self.ignored + self.rejected

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, ignored={self.ignored}, rejected={self.rejected})"
