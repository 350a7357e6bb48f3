"""
Startup preload of the word cache.
"""

import time
from typing import Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import PreloadError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .word_cache import WordCache
    from shared.metrics import MetricsCollector


class CacheInitializer:
    """Runs the one-time word cache preload before the service accepts traffic."""

    def __init__(self, word_cache: "WordCache", metrics: Optional["MetricsCollector"] = None):
        self.word_cache = word_cache
        self.metrics = metrics
        self.logger = get_logger("inverser.cache.initializer")

    async def run(self) -> int:
        """
        Load the cache from the durable store.

        Raises:
            PreloadError: the store failed at any page. This is fatal to startup
                and is never retried here.
        """
        self.logger.info("Cache initialization started")
        start = time.perf_counter()

        try:
            loaded = await self.word_cache.load_all()
        except PreloadError:
            self._record(time.perf_counter() - start, "error")
            raise
        except Exception as e:
            self._record(time.perf_counter() - start, "error")
            self.logger.error("Error during cache initialization", error=str(e))
            raise PreloadError(
                f"Word cache preload failed: {e}",
                details={"cache_state": self.word_cache.state.value},
            ) from e

        duration = time.perf_counter() - start
        self._record(duration, "ok", loaded)
        self.logger.info(
            "Cache initialization completed successfully",
            words=loaded,
            duration_ms=round(duration * 1000, 2),
        )
        return loaded

    def _record(self, duration: float, status: str, loaded: int = 0) -> None:
        if not self.metrics:
            return
        self.metrics.observe_histogram("word_cache_preload_duration_seconds", duration, status=status)
        if loaded:
            self.metrics.increment_counter("word_cache_preload_records_total", amount=loaded)
