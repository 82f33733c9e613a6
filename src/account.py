import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping

from models import AccountSnapshot, HeldTransaction, ProcessingResult, Transaction, TransactionType

logger = logging.getLogger(__name__)


class Account:
    """
    Balance state for a single client.
    Applies transactions one at a time and keeps the deposits and withdrawals
    that may later be referenced by a dispute, resolve or chargeback.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.available = Decimal("0")
        self.held = Decimal("0")
        self.locked = False
        self._history: Dict[int, HeldTransaction] = {}

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    @property
    def history(self) -> Mapping[int, HeldTransaction]:
        return MappingProxyType(self._history)

    def apply(self, transaction: Transaction) -> None:
        """Apply a transaction. Transactions that break a business rule are ignored."""
        self.process_transaction(transaction)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a transaction and report what happened.

        Returns:
            APPLIED: Balances and/or history changed
            anything else: Rejected, the account is left exactly as it was
        """
        if self.locked:
            result = ProcessingResult.ACCOUNT_LOCKED
        else:
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
                    raise TypeError(f"Unsupported transaction type: {transaction.transaction_type!r}")

        if not result.applied:
            logger.debug(f"Client {self.client_id}: ignored {transaction} ({result.value})")
        return result

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            return ProcessingResult.MISSING_AMOUNT

        if transaction.transaction_id in self._history:
            return ProcessingResult.DUPLICATE_TRANSACTION

        self.available += transaction.amount
        self._hold_for_dispute(transaction)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            return ProcessingResult.MISSING_AMOUNT

        if transaction.transaction_id in self._history:
            return ProcessingResult.DUPLICATE_TRANSACTION

        if self.available < transaction.amount:
            return ProcessingResult.INSUFFICIENT_FUNDS

        self.available -= transaction.amount
        self._hold_for_dispute(transaction)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original = self._history.get(transaction.transaction_id)

        if original is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        # Withdrawn funds are no longer in our custody, so they cannot be held.
        if original.transaction_type != TransactionType.DEPOSIT:
            return ProcessingResult.NOT_DISPUTABLE

        if original.disputed:
            return ProcessingResult.ALREADY_DISPUTED

        self.available -= original.amount
        self.held += original.amount
        original.disputed = True
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original = self._history.get(transaction.transaction_id)

        if original is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not original.disputed:
            return ProcessingResult.NOT_DISPUTED

        self.held -= original.amount
        self.available += original.amount
        original.disputed = False
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original = self._history.get(transaction.transaction_id)

        if original is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        if not original.disputed:
            return ProcessingResult.NOT_DISPUTED

        self.held -= original.amount
        self.locked = True
        del self._history[transaction.transaction_id]
        logger.info(f"Client {self.client_id}: locked after chargeback of tx {transaction.transaction_id}")
        return ProcessingResult.APPLIED

    def _hold_for_dispute(self, transaction: Transaction) -> None:
        self._history[transaction.transaction_id] = HeldTransaction(
            transaction_id=transaction.transaction_id,
            transaction_type=transaction.transaction_type,
            amount=transaction.amount,
        )
