import logging
import threading
from typing import Iterable, List

from ledger import Ledger
from message_queue import InMemoryQueue
from models import AccountStatus, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class ShardedLedger:
    """
    Processes transactions on several worker threads, partitioned by client id.

    Each shard is a plain Ledger drained by exactly one worker from its own
    queue, so a client's transactions keep their input order and every
    account has a single owner. No locking happens between shards.
    An exception in a worker stops that shard and is re-raised by process_all.
    """

    def __init__(self, num_workers: int = 4):
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self._num_workers = num_workers
        self._shards = [Ledger() for _ in range(num_workers)]
        self._queues = [InMemoryQueue() for _ in range(num_workers)]
        self._errors: List[Exception] = []

    def shard_for(self, client_id: int) -> int:
        return client_id % self._num_workers

    def process_all(self, transactions: Iterable[Transaction]) -> ProcessingStats:
        """Publish transactions from the calling thread and wait for all shards to drain."""
        logger.info(f"Starting {self._num_workers} ledger workers")

        workers = []
        for shard_index in range(self._num_workers):
            worker = threading.Thread(
                target=self._consume_transactions,
                args=(shard_index,),
                name=f"ledger-shard-{shard_index}",
            )
            worker.start()
            workers.append(worker)

        try:
            for transaction in transactions:
                self._queues[self.shard_for(transaction.client_id)].publish_message(transaction)
        finally:
            for queue in self._queues:
                queue.shutdown()
            for worker in workers:
                worker.join()

        if self._errors:
            raise self._errors[0]

        logger.info("All ledger workers finished")
        return self.stats

    @property
    def stats(self) -> ProcessingStats:
        merged = ProcessingStats()
        for shard in self._shards:
            merged.merge(shard.stats)
        return merged

    def snapshot(self) -> List[AccountStatus]:
        statuses: List[AccountStatus] = []
        for shard in self._shards:
            statuses.extend(shard.snapshot())
        return statuses

    def _consume_transactions(self, shard_index: int) -> None:
        """Worker loop: pull from this shard's queue until it is shut down and drained."""
        queue = self._queues[shard_index]
        shard = self._shards[shard_index]
        while True:
            transaction = queue.consume_message()
            if transaction is None:
                if queue.is_shutdown() and queue.is_empty():
                    break
                continue
            try:
                shard.process(transaction)
            except Exception as e:
                logger.error(f"Shard {shard_index} failed on {transaction}: {e!r}, abandoning {queue.size()} queued transactions")
                self._errors.append(e)
                break
