"""
Two-tier word cache: an in-memory dictionary in front of the durable store.
"""

import asyncio
import threading
from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import PreloadError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..persistence.postgres import PostgreSQLPersistence
    from .write_back import WriteBackQueue
    from shared.metrics import MetricsCollector


DEFAULT_BATCH_SIZE = 1000
DEFAULT_BATCH_DELAY_SECONDS = 0.01


class CacheState(str, Enum):
    """Word cache lifecycle."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class WordCache:
    """
    In-memory word cache backed by the durable word mapping.

    Keys are normalized words, values are normalized inverted cores. Reads only
    ever consult memory; a miss is resolved by the caller. The readiness state
    has a single writer, ``load_all``.
    """

    def __init__(
        self,
        store: "PostgreSQLPersistence",
        write_back: Optional["WriteBackQueue"] = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY_SECONDS,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.write_back = write_back
        self.batch_size = max(1, batch_size)
        self.batch_delay = max(0.0, batch_delay)
        self.metrics = metrics
        self.logger = get_logger("inverser.cache.word_cache")
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._state = CacheState.UNINITIALIZED

    @property
    def state(self) -> CacheState:
        """Current lifecycle state."""
        return self._state

    def is_ready(self) -> bool:
        """Whether the preload completed and transformations may be served."""
        return self._state is CacheState.READY

    @property
    def size(self) -> int:
        """Number of cached entries."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[str]:
        """Return the cached inverted core for ``key``, or None on a miss."""
        value = self._entries.get(key)
        self._record_lookup(value is not None)
        return value

    def put(self, key: str, value: str) -> None:
        """
        Cache an entry in memory and schedule its durable write.

        The in-memory write is immediately visible to every reader; the durable
        write happens later on the write-back queue and may fail independently.
        """
        self._set(key, value)

        if self.write_back is not None:
            self.write_back.submit(key, value)

    async def load_all(self) -> int:
        """
        Page through the durable store and fill the in-memory tier.

        Readiness flips to true only when every page was read. Any error leaves
        the cache in the failed state and is re-raised to the caller.
        """
        with self._lock:
            if self._state is CacheState.LOADING:
                raise PreloadError("Word cache preload already in progress")
            self._state = CacheState.LOADING

        self.logger.info("Starting to load word cache from database", batch_size=self.batch_size)

        page_number = 1
        total_loaded = 0
        try:
            while True:
                batch = await self.store.read_word_page(page_number, self.batch_size)
                if not batch:
                    break

                with self._lock:
                    for record in batch:
                        self._entries[record.word] = record.inversed_word
                total_loaded += len(batch)

                self.logger.info(
                    "Loaded word cache batch",
                    page_number=page_number,
                    batch_count=len(batch),
                    total_loaded=total_loaded,
                )

                if len(batch) < self.batch_size:
                    break

                page_number += 1
                await asyncio.sleep(self.batch_delay)

        except Exception as e:
            with self._lock:
                self._state = CacheState.FAILED
            self.logger.error(
                "Error loading word cache from database",
                page_number=page_number,
                total_loaded=total_loaded,
                error=str(e),
            )
            raise

        with self._lock:
            self._state = CacheState.READY
        self._record_size()

        self.logger.info("Word cache loaded successfully", total_words=total_loaded, pages=page_number)
        return total_loaded

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        return {
            "state": self._state.value,
            "ready": self.is_ready(),
            "size": self.size,
            "batch_size": self.batch_size,
            "pending_write_backs": self.write_back.pending if self.write_back is not None else 0,
        }

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value
        self._record_size()

    def _record_lookup(self, hit: bool) -> None:
        if self.metrics:
            self.metrics.increment_counter("word_cache_lookups_total", result="hit" if hit else "miss")

    def _record_size(self) -> None:
        if self.metrics:
            self.metrics.set_gauge("word_cache_size", len(self._entries))
