import threading
from queue import Queue, Empty
from typing import List, Optional

from models import Transaction


class PartitionedQueue:
    """
    Thread-safe message queue split into one FIFO partition per worker.
    A client's transactions always go to the same partition, in publish order.
    All synchronization is internal - callers never need to lock.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self, num_partitions: int):
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be at least 1, got {num_partitions}")
        self._partitions: List[Queue[Transaction]] = [Queue() for _ in range(num_partitions)]
        self._shutdown_event = threading.Event()

    @property
    def num_partitions(self) -> int:
        return len(self._partitions)

    def partition_for(self, client_id: int) -> int:
        return client_id % len(self._partitions)

    def publish_message(self, message: Transaction) -> None:
        """Add message to its client's partition. Thread-safe."""
        self._partitions[self.partition_for(message.client_id)].put(message)

    def consume_message(self, partition: int) -> Optional[Transaction]:
        """
        Get next message from a partition.
        Returns None if the partition is empty after timeout.
        Thread-safe.
        """
        try:
            return self._partitions[partition].get(timeout=self.DEFAULT_TIMEOUT)
        except Empty:
            return None

    def is_empty(self, partition: int) -> bool:
        """Check if a partition is empty."""
        return self._partitions[partition].empty()

    def shutdown(self) -> None:
        """Signal no more messages will be published."""
        self._shutdown_event.set()

    def is_shutdown(self) -> bool:
        """Check if shutdown has been signaled."""
        return self._shutdown_event.is_set()
