"""
Unit tests for the word cache write-back queue.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_inverser.app.cache.write_back import WriteBackQueue
from service_inverser.app.models import MAX_WORD_LENGTH
from shared.errors import PersistenceError


class DummyMetrics:
    """Minimal metrics collector stub."""

    def __init__(self):
        self.counters = []
        self.observations = []

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        self.counters.append((metric_name, labels.get("result")))

    def observe_histogram(self, metric_name: str, value: float, **labels):
        self.observations.append((metric_name, value))

    def results(self):
        return [result for name, result in self.counters if name == "write_back_total"]


class TestWriteBackQueue:
    """Test cases for WriteBackQueue."""

    @pytest.fixture
    def store(self):
        """Mock durable store."""
        store = MagicMock()
        store.upsert_word = AsyncMock()
        return store

    @pytest.fixture
    def metrics(self):
        return DummyMetrics()

    def test_submit_without_workers_only_enqueues(self, store, metrics):
        """Test submit returns immediately and does not touch the store."""
        queue = WriteBackQueue(store, metrics=metrics)

        assert queue.submit("hello", "olleh") is True
        assert queue.pending == 1
        store.upsert_word.assert_not_called()
        assert metrics.results() == ["enqueued"]

    def test_submit_drops_when_full(self, store, metrics):
        """Test a full queue drops the entry instead of blocking or raising."""
        queue = WriteBackQueue(store, maxsize=2, metrics=metrics)

        assert queue.submit("a1", "1a") is True
        assert queue.submit("b2", "2b") is True
        assert queue.submit("c3", "3c") is False

        assert queue.pending == 2
        assert metrics.results() == ["enqueued", "enqueued", "dropped"]

    def test_submit_rejects_overlong_words(self, store, metrics):
        """Test words beyond the durable column length are not queued."""
        queue = WriteBackQueue(store, metrics=metrics)
        word = "a" * (MAX_WORD_LENGTH + 1)

        assert queue.submit(word, word[::-1]) is False
        assert queue.pending == 0
        assert metrics.results() == ["rejected"]

    @pytest.mark.asyncio
    async def test_workers_persist_entries(self, store, metrics):
        """Test started workers upsert every queued entry."""
        queue = WriteBackQueue(store, workers=2, metrics=metrics)
        await queue.start()

        queue.submit("hello", "olleh")
        queue.submit("world", "dlrow")
        await queue.stop()

        store.upsert_word.assert_any_await("hello", "olleh")
        store.upsert_word.assert_any_await("world", "dlrow")
        assert store.upsert_word.await_count == 2
        assert metrics.results().count("persisted") == 2
        assert [name for name, _ in metrics.observations] == ["write_back_queue_seconds"] * 2
        assert all(seconds >= 0 for _, seconds in metrics.observations)
        assert queue.running is False

    @pytest.mark.asyncio
    async def test_worker_survives_store_failure(self, store, metrics):
        """Test a failed upsert is logged and the worker keeps consuming."""
        store.upsert_word = AsyncMock(side_effect=[PersistenceError("upsert_word", "deadlock"), None])
        queue = WriteBackQueue(store, workers=1, metrics=metrics)
        await queue.start()

        queue.submit("first", "tsrif")
        queue.submit("second", "dnoces")
        await queue.stop()

        assert store.upsert_word.await_count == 2
        assert "failed" in metrics.results()
        assert "persisted" in metrics.results()

    @pytest.mark.asyncio
    async def test_stop_times_out_on_slow_store(self, store):
        """Test shutdown does not hang when the store never answers."""
        never = asyncio.Event()

        async def hang(word, inversed_word):
            await never.wait()

        store.upsert_word = AsyncMock(side_effect=hang)
        queue = WriteBackQueue(store, workers=1, drain_timeout=0.05)
        await queue.start()
        queue.submit("stuck", "kcuts")

        await asyncio.wait_for(queue.stop(), timeout=2)

        assert queue.running is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, store):
        """Test starting twice does not double the workers."""
        queue = WriteBackQueue(store, workers=3)
        await queue.start()
        await queue.start()

        assert len(queue._workers) == 3

        await queue.stop()
        assert queue._workers == []

    @pytest.mark.asyncio
    async def test_stop_without_start(self, store):
        """Test stopping an unstarted queue is a no-op."""
        queue = WriteBackQueue(store)
        queue.submit("hello", "olleh")

        await queue.stop()

        assert queue.pending == 1

    @pytest.mark.asyncio
    async def test_submit_after_stop_is_dropped(self, store, metrics):
        """Test entries offered after shutdown are refused instead of stranded."""
        queue = WriteBackQueue(store, metrics=metrics)
        await queue.start()
        await queue.stop()

        assert queue.submit("hello", "olleh") is False

        assert queue.pending == 0
        assert queue.closed is True
        assert metrics.results() == ["dropped"]
        store.upsert_word.assert_not_called()

    @pytest.mark.asyncio
    async def test_restart_accepts_entries_again(self, store):
        """Test a stopped queue takes entries again once restarted."""
        queue = WriteBackQueue(store, workers=1)
        await queue.start()
        await queue.stop()
        await queue.start()

        assert queue.submit("hello", "olleh") is True
        await queue.stop()

        store.upsert_word.assert_awaited_once_with("hello", "olleh")
