"""
Sentence transformation over the word cache.
"""

import time
import uuid
from typing import List, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import CacheNotReadyError
from ..models import TransformResult
from .inverter import WORD_SEPARATOR, invert, normalize_core, reconstruct

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..cache.word_cache import WordCache
    from shared.metrics import MetricsCollector


FAILURE_MESSAGE = "An error occurred while processing your request"


class SentenceTransformer:
    """Inverts every word of a sentence, reusing cached inversions where possible."""

    def __init__(self, word_cache: "WordCache", metrics: Optional["MetricsCollector"] = None):
        self.word_cache = word_cache
        self.metrics = metrics
        self.logger = get_logger("inverser.inversion.transformer")

    def transform(self, sentence: Optional[str], correlation_id: Optional[str] = None) -> TransformResult:
        """
        Invert a sentence token by token.

        Raises:
            CacheNotReadyError: the word cache has not finished its preload.
                Nothing else propagates; other failures come back as an
                unsuccessful result.
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        start = time.perf_counter()

        if not self.word_cache.is_ready():
            self._record("not_ready")
            raise CacheNotReadyError(details={"cache_state": self.word_cache.state.value})

        try:
            if not sentence or sentence.isspace():
                self._record("ok")
                return TransformResult(
                    correlation_id=correlation_id,
                    sentence="",
                    processing_time_ms=self._elapsed_ms(start),
                )

            inverted: List[str] = [self._transform_token(token) for token in sentence.split(WORD_SEPARATOR)]

            self._record("ok")
            return TransformResult(
                correlation_id=correlation_id,
                sentence=WORD_SEPARATOR.join(inverted),
                processing_time_ms=self._elapsed_ms(start),
            )

        except Exception as e:
            self.logger.error(
                "Error inverting words",
                correlation_id=correlation_id,
                error=str(e),
                exc_info=e,
            )
            self._record("error")
            return TransformResult(
                correlation_id=correlation_id,
                processing_time_ms=self._elapsed_ms(start),
                success=False,
                error_message=FAILURE_MESSAGE,
                errors=[str(e)],
            )

    def _transform_token(self, token: str) -> str:
        if not token or token.isspace():
            return token

        key = normalize_core(token)
        if not key:
            # Punctuation only
            return token

        cached = self.word_cache.get(key)
        if cached is not None:
            return reconstruct(token, cached)

        inverted = invert(token)
        self._cache_word(key, normalize_core(inverted))
        return inverted

    def _cache_word(self, key: str, inverted_core: str) -> None:
        try:
            self.word_cache.put(key, inverted_core)
        except Exception as e:
            self.logger.warning("Failed to cache word", word=key, error=str(e))

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("sentence_transformations_total", status=status)

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)
