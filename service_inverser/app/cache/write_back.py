"""
Bounded write-back queue for the word cache.

Cache misses hand their freshly computed entries to this queue; background
workers persist them to the durable store. Submitting never blocks: when the
queue is full the entry is dropped and only lives in the in-memory tier until
the word is computed again.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..models import MAX_WORD_LENGTH

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..persistence.postgres import PostgreSQLPersistence
    from shared.metrics import MetricsCollector


@dataclass(frozen=True)
class WriteBackItem:
    """A cache entry waiting to be persisted."""
    word: str
    inversed_word: str
    enqueued_at: float = field(default_factory=time.monotonic)


class WriteBackQueue:
    """Persists cache entries to the durable store from background workers."""

    def __init__(
        self,
        store: "PostgreSQLPersistence",
        *,
        maxsize: int = 10000,
        workers: int = 2,
        drain_timeout: float = 5.0,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.metrics = metrics
        self.worker_count = max(1, workers)
        self.drain_timeout = drain_timeout
        self.logger = get_logger("inverser.cache.write_back")
        self._queue: "asyncio.Queue[WriteBackItem]" = asyncio.Queue(maxsize=max(1, maxsize))
        self._workers: List[asyncio.Task] = []
        self.running = False
        self.closed = False

    @property
    def pending(self) -> int:
        """Number of entries waiting to be persisted."""
        return self._queue.qsize()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    async def start(self):
        """Start the background workers."""
        if self.running:
            return

        self.running = True
        self.closed = False
        self._workers = [
            asyncio.create_task(self._worker_loop(index), name=f"word-cache-write-back-{index}")
            for index in range(self.worker_count)
        ]
        self.logger.info("Write-back queue started", workers=self.worker_count, maxsize=self.maxsize)

    async def stop(self):
        """Drain pending entries (bounded by ``drain_timeout``) and stop the workers."""
        if not self.running:
            return

        # Refuse new entries so the drain below can finish
        self.closed = True

        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Write-back drain timed out; pending entries discarded", pending=self.pending)

        self.running = False
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        self.logger.info("Write-back queue stopped")

    def submit(self, word: str, inversed_word: str) -> bool:
        """
        Schedule a durable upsert without waiting for it.

        Returns False when the entry was not queued (queue stopped, queue full
        or word too long).
        """
        if self.closed:
            self.logger.warning("Write-back queue stopped; entry dropped", word=word)
            self._record("dropped")
            return False

        if len(word) > MAX_WORD_LENGTH or len(inversed_word) > MAX_WORD_LENGTH:
            self.logger.warning("Word exceeds durable length limit; not persisted", word_length=len(word))
            self._record("rejected")
            return False

        try:
            self._queue.put_nowait(WriteBackItem(word, inversed_word))
        except asyncio.QueueFull:
            self.logger.warning("Write-back queue full; entry dropped", word=word, pending=self.pending)
            self._record("dropped")
            return False

        self._record("enqueued")
        return True

    async def _worker_loop(self, index: int):
        """Persist queued entries until cancelled."""
        while True:
            item = await self._queue.get()
            try:
                await self.store.upsert_word(item.word, item.inversed_word)
                self._record("persisted")
                self._observe_wait(time.monotonic() - item.enqueued_at)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.warning(
                    "Failed to persist cached word",
                    word=item.word,
                    worker=index,
                    error=str(e),
                )
                self._record("failed")
            finally:
                self._queue.task_done()

    def _record(self, result: str) -> None:
        if not self.metrics:
            return
        try:
            self.metrics.increment_counter("write_back_total", result=result)
        except Exception as exc:  # pragma: no cover - metrics failures should never break write-back
            self.logger.debug("Failed to record write-back metric", error=str(exc))

    def _observe_wait(self, seconds: float) -> None:
        if self.metrics:
            self.metrics.observe_histogram("write_back_queue_seconds", seconds)
