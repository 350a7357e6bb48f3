"""
Unit tests for the cache initializer.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_inverser.app.cache.initializer import CacheInitializer
from service_inverser.app.cache.word_cache import CacheState, WordCache
from service_inverser.app.models import WordRecord
from shared.errors import PersistenceError, PreloadError


class TestCacheInitializer:
    """Test cases for CacheInitializer."""

    @pytest.fixture
    def store(self):
        """Mock store holding two word mappings."""
        store = MagicMock()
        store.read_word_page = AsyncMock(return_value=[
            WordRecord(word="hello", inversed_word="olleh"),
            WordRecord(word="world", inversed_word="dlrow"),
        ])
        return store

    @pytest.fixture
    def metrics(self):
        return MagicMock()

    @pytest.mark.asyncio
    async def test_run_loads_cache(self, store, metrics):
        """Test a successful preload makes the cache ready."""
        cache = WordCache(store, batch_delay=0)
        initializer = CacheInitializer(cache, metrics=metrics)

        loaded = await initializer.run()

        assert loaded == 2
        assert cache.is_ready() is True
        assert cache.get("world") == "dlrow"
        metrics.increment_counter.assert_called_once_with("word_cache_preload_records_total", amount=2)
        name, _ = metrics.observe_histogram.call_args.args
        assert name == "word_cache_preload_duration_seconds"
        assert metrics.observe_histogram.call_args.kwargs == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_run_wraps_store_failure(self, store, metrics):
        """Test a store failure surfaces as a preload error and the cache stays not ready."""
        store.read_word_page = AsyncMock(side_effect=PersistenceError("read_word_page", "connection refused"))
        cache = WordCache(store, batch_delay=0)
        initializer = CacheInitializer(cache, metrics=metrics)

        with pytest.raises(PreloadError) as exc_info:
            await initializer.run()

        assert exc_info.value.code == "CACHE_PRELOAD_FAILED"
        assert exc_info.value.status_code == 503
        assert "connection refused" in exc_info.value.message
        assert exc_info.value.details == {"cache_state": "failed"}
        assert isinstance(exc_info.value.__cause__, PersistenceError)
        assert cache.state is CacheState.FAILED
        assert metrics.observe_histogram.call_args.kwargs == {"status": "error"}
        metrics.increment_counter.assert_not_called()

    @pytest.mark.asyncio
    async def test_run_passes_preload_error_through(self):
        """Test a preload error from the cache is not wrapped twice."""
        cache = MagicMock()
        original = PreloadError("Word cache preload already in progress")
        cache.load_all = AsyncMock(side_effect=original)
        initializer = CacheInitializer(cache)

        with pytest.raises(PreloadError) as exc_info:
            await initializer.run()

        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_run_without_metrics(self, store):
        """Test the initializer works without a metrics collector."""
        initializer = CacheInitializer(WordCache(store, batch_delay=0))

        assert await initializer.run() == 2
