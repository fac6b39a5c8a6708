from decimal import Decimal
from typing import Dict, Optional

from models import StoredTransaction


class DepositStore:
    """
    Per-account history of deposits, kept for dispute lookups.
    Entries are never removed, so a resolved or charged back deposit
    can still be looked up afterwards.
    """

    def __init__(self):
        self._transactions: Dict[int, StoredTransaction] = {}

    def store(self, transaction_id: int, amount: Decimal) -> None:
        """Store a deposit, replacing any earlier entry with the same id."""
        self._transactions[transaction_id] = StoredTransaction(amount=amount)

    def get(self, transaction_id: int) -> Optional[StoredTransaction]:
        return self._transactions.get(transaction_id)

    def is_disputed(self, transaction_id: int) -> bool:
        stored = self._transactions.get(transaction_id)
        return stored is not None and stored.disputed

    def mark_disputed(self, transaction_id: int) -> None:
        self._transactions[transaction_id].dispute()

    def clear_dispute(self, transaction_id: int) -> None:
        self._transactions[transaction_id].undispute()

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def __len__(self) -> int:
        return len(self._transactions)
