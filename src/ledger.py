import threading
from typing import Dict, Iterator, Optional

from account import Account
from models import AccountSnapshot, ProcessingStats, Transaction


class Ledger:
    """
    Accounts keyed by client id, created on first reference.
    Every transaction is routed through consume(), so each Account has exactly one owner.
    """

    def __init__(self, stats: Optional[ProcessingStats] = None):
        self._accounts: Dict[int, Account] = {}
        self._stats = stats if stats is not None else ProcessingStats()

        # Guards lazy insertion only. Workers that share a ledger own disjoint
        # sets of clients, so the accounts themselves need no lock.
        self._accounts_lock = threading.Lock()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def consume(self, transaction: Transaction) -> None:
        """Route a transaction to its client's account. Rejected transactions are counted, never raised."""
        account = self._get_or_create_account(transaction.client_id)
        result = account.process_transaction(transaction)
        self._stats.record(result)

    def accounts(self) -> Iterator[AccountSnapshot]:
        """
        Yield a snapshot of every known account.
        The order is not guaranteed; sort the snapshots if a stable order is needed.
        """
        with self._accounts_lock:
            accounts = list(self._accounts.values())
        for account in accounts:
            yield account.snapshot()

    def get(self, client_id: int) -> Optional[Account]:
        return self._accounts.get(client_id)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def _get_or_create_account(self, client_id: int) -> Account:
        with self._accounts_lock:
            if client_id not in self._accounts:
                self._accounts[client_id] = Account(client_id)
            return self._accounts[client_id]
