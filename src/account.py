import logging
from decimal import Decimal, localcontext

from deposit_store import DepositStore
from models import MONEY_CONTEXT, AccountStatus, ProcessingResult, Transaction, TransactionType

logger = logging.getLogger(__name__)


class Account:
    """
    Balances and dispute-eligible history of a single client.

    apply() expects a transaction that already passed Transaction.is_valid()
    and was routed to this client. Every rejection is a silent no-op that
    returns ProcessingResult.IGNORED. The only error raised is a
    decimal.DecimalException when a balance would need more than
    MONEY_PRECISION digits; the balances are left untouched in that case.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.available = Decimal("0")
        self.held = Decimal("0")
        self.locked = False
        self.deposits = DepositStore()

    @property
    def total(self) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return self.available + self.held

    def apply(self, transaction: Transaction) -> ProcessingResult:
        if self.locked:
            logger.debug(f"Client {self.client_id}: account locked, ignoring {transaction}")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                return ProcessingResult.IGNORED

    def status(self) -> AccountStatus:
        return AccountStatus(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )

    def credit(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available += amount

    def debit(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available -= amount

    def hold(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            available = self.available - amount
            held = self.held + amount
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            held = self.held - amount
            available = self.available + amount
        self.available, self.held = available, held

    def remove_held(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.held -= amount

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        self.credit(transaction.amount)
        self.deposits.store(transaction.transaction_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if self.available < transaction.amount:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({self.available} < {transaction.amount})")
            return ProcessingResult.IGNORED

        self.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original = self.deposits.get(transaction.transaction_id)

        if original is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: no such deposit for client {self.client_id}")
            return ProcessingResult.IGNORED

        if original.disputed:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.IGNORED

        # May drive available negative when the deposit was already withdrawn.
        self.hold(original.amount)
        self.deposits.mark_disputed(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        if not self.deposits.is_disputed(transaction.transaction_id):
            logger.debug(f"Resolve for tx {transaction.transaction_id}: transaction not under dispute")
            return ProcessingResult.IGNORED

        original = self.deposits.get(transaction.transaction_id)
        self.release_hold(original.amount)
        self.deposits.clear_dispute(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        if not self.deposits.is_disputed(transaction.transaction_id):
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: transaction not under dispute")
            return ProcessingResult.IGNORED

        original = self.deposits.get(transaction.transaction_id)
        self.remove_held(original.amount)
        self.deposits.clear_dispute(transaction.transaction_id)
        self.locked = True
        logger.debug(f"Client {self.client_id}: locked after chargeback of tx {transaction.transaction_id}")
        return ProcessingResult.APPLIED
