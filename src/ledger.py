import logging
from typing import Dict, Iterable, List, Optional

from account import Account
from models import AccountStatus, ProcessingResult, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)


class Ledger:
    """
    Routes transactions to per-client accounts, strictly in the order received.

    Accounts are created lazily, and only by a deposit. Transactions with the
    wrong amount shape, or addressed to a client that has no account yet, are
    dropped before any account is touched.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transaction: Transaction) -> ProcessingResult:
        result = self._route(transaction)
        self._stats.record(result)
        return result

    def process_all(self, transactions: Iterable[Transaction]) -> ProcessingStats:
        """Apply every transaction in iteration order."""
        for transaction in transactions:
            self.process(transaction)
        return self._stats

    def get_account(self, client_id: int) -> Optional[Account]:
        return self._accounts.get(client_id)

    def snapshot(self) -> List[AccountStatus]:
        """Status of every tracked account, in no particular order."""
        return [account.status() for account in self._accounts.values()]

    def _route(self, transaction: Transaction) -> ProcessingResult:
        if not transaction.is_valid():
            logger.debug(f"Dropping {transaction}: amount presence does not match its type")
            return ProcessingResult.REJECTED

        account = self._accounts.get(transaction.client_id)
        if account is None:
            if transaction.transaction_type != TransactionType.DEPOSIT:
                logger.debug(f"Dropping {transaction}: client {transaction.client_id} has no account")
                return ProcessingResult.REJECTED
            account = Account(transaction.client_id)
            self._accounts[transaction.client_id] = account

        return account.apply(transaction)

    def __len__(self) -> int:
        return len(self._accounts)
