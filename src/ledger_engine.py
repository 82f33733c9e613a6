import logging
import threading
from typing import Iterable, List, Optional, TextIO

from errors import TransactionParseError
from ledger import Ledger
from message_queue import PartitionedQueue
from models import ProcessingStats
from transaction_reader import read_transactions

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays transaction sources into a Ledger.
    With more than one worker, transactions are sharded by client id across
    worker threads; each worker owns its clients' accounts exclusively.
    """

    def __init__(self, num_workers: int = 0, ledger: Optional[Ledger] = None):
        self._num_workers = num_workers
        self._ledger = ledger if ledger is not None else Ledger()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._ledger.stats

    def process_files(self, filepaths: Iterable[str], skip_invalid: bool = False) -> Ledger:
        """
        Process CSV files in order into the same ledger and return it.
        A malformed file stops at the bad row; with skip_invalid the next file is
        processed, otherwise the TransactionParseError propagates.
        """
        for filepath in filepaths:
            try:
                self.process_file(filepath)
            except TransactionParseError as e:
                if not skip_invalid:
                    raise
                logger.error(f"Skipping rest of {filepath}: {e}")

        stats = self.stats
        logger.info(f"Processed: {stats.processed}, Rejected: {stats.rejected}, Accounts: {len(self._ledger)}")
        return self._ledger

    def process_file(self, filepath: str) -> None:
        """Process a single CSV file."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            self.process_stream(f, source=filepath)

    def process_stream(self, stream: TextIO, source: str = "<stream>") -> None:
        """
        Process CSV text from an open stream.
        An exception raised by a worker is re-raised here once all workers have stopped.
        """
        transactions = read_transactions(stream, source=source)

        if self._num_workers <= 1:
            for transaction in transactions:
                self._ledger.consume(transaction)
            return

        queue = PartitionedQueue(self._num_workers)
        worker_errors: List[BaseException] = []
        workers = []
        for partition in range(self._num_workers):
            worker = threading.Thread(target=self._consume_transactions, args=(queue, partition, worker_errors))
            worker.start()
            workers.append(worker)

        # Publish from this thread so parse errors reach the caller.
        try:
            for transaction in transactions:
                queue.publish_message(transaction)
        finally:
            queue.shutdown()
            for worker in workers:
                worker.join()

        if worker_errors:
            raise worker_errors[0]

    def _consume_transactions(self, queue: PartitionedQueue, partition: int, errors: List[BaseException]) -> None:
        """Worker loop: pull from one partition and apply until shutdown."""
        while True:
            transaction = queue.consume_message(partition)
            if transaction is None:
                if queue.is_shutdown() and queue.is_empty(partition):
                    break
                continue

            try:
                self._ledger.consume(transaction)
            except Exception as e:
                logger.error(f"Worker for partition {partition} failed on {transaction}: {e}")
                errors.append(e)
                return
