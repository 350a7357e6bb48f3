"""
Word Inverser service.
"""

import uuid
from typing import Optional

from fastapi import Body, Query
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import CacheNotReadyError
from shared.logging import get_correlation_id

from .audit.request_log import RequestResponseLogger
from .audit.service import RequestLogService
from .cache.initializer import CacheInitializer
from .cache.word_cache import WordCache
from .cache.write_back import WriteBackQueue
from .inversion.transformer import SentenceTransformer
from .models import MAX_PAGE_SIZE, InverseWordsRequest, InverseWordsResponse, error_body
from .persistence.postgres import PostgreSQLPersistence

RETRY_AFTER_SECONDS = "5"
INVALID_PAGING_MESSAGE = (
    f"Invalid pagination parameters. PageNumber must be >= 1 and PageSize must be between 1 and {MAX_PAGE_SIZE}."
)


class WordInverserService(BaseService):
    """Word Inverser service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__("inverser", 8000, config=config)

        # Components are wired explicitly, leaf first
        self.persistence = PostgreSQLPersistence(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size,
            command_timeout=self.config.postgres_command_timeout,
        )
        self.write_back = WriteBackQueue(
            self.persistence,
            maxsize=self.config.write_back_queue_size,
            workers=self.config.write_back_workers,
            drain_timeout=self.config.write_back_drain_timeout,
            metrics=self.metrics,
        )
        self.word_cache = WordCache(
            self.persistence,
            self.write_back,
            batch_size=self.config.cache_batch_size,
            batch_delay=self.config.cache_batch_delay_ms / 1000,
            metrics=self.metrics,
        )
        self.cache_initializer = CacheInitializer(self.word_cache, metrics=self.metrics)
        self.transformer = SentenceTransformer(self.word_cache, metrics=self.metrics)
        self.request_log = RequestLogService(self.persistence)
        self.request_logger = RequestResponseLogger(self.persistence, enabled=self.config.request_log_enabled)

        self.app.middleware("http")(self.request_logger)

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_inverser_routes()

        self.app.state.inverser_service = self

    def _setup_inverser_routes(self):
        """Set up word inverser routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "inverser",
                "message": "Word Inverser API",
                "version": "1.0.0",
                "capabilities": ["word_inversion", "word_cache", "request_log"]
            }

        @self.app.get("/ready")
        async def readiness():
            """Readiness probe: 200 once the word cache is loaded."""
            body = {"ready": self.word_cache.is_ready(), "cache_state": self.word_cache.state.value}
            if not self.word_cache.is_ready():
                return JSONResponse(status_code=503, content=body, headers={"Retry-After": RETRY_AFTER_SECONDS})
            return body

        @self.app.post("/api/v1/words/inverse", response_model=InverseWordsResponse)
        async def inverse_words(request: Optional[InverseWordsRequest] = Body(None)):
            """Invert all words in the provided sentence."""
            if request is not None and request.correlation_id is not None:
                correlation_id = str(request.correlation_id)
            else:
                correlation_id = get_correlation_id() or str(uuid.uuid4())

            if request is None or request.sentence is None or not request.sentence.strip():
                self.logger.warning("Bad request: Sentence cannot be empty", correlation_id=correlation_id)
                return JSONResponse(status_code=400, content=error_body(correlation_id, "Sentence cannot be empty"))

            self.logger.info("Processing word inversion request", correlation_id=correlation_id)

            try:
                result = self.transformer.transform(request.sentence, correlation_id)
            except CacheNotReadyError as exc:
                self.logger.warning("Cache not ready", correlation_id=correlation_id)
                self.metrics.record_error(exc.code)
                return JSONResponse(
                    status_code=503,
                    content=error_body(
                        correlation_id,
                        exc.message,
                        ["The application is still initializing. Please try again shortly."],
                    ),
                    headers={"Retry-After": RETRY_AFTER_SECONDS},
                )

            response = InverseWordsResponse.from_result(result)
            if not result.success:
                return JSONResponse(status_code=500, content=response.model_dump(mode="json"))

            self.metrics.record_business_event("sentence_inverted")
            return response

        @self.app.get("/api/v1/words/cache")
        async def cache_stats():
            """Word cache statistics."""
            return self.word_cache.stats()

        @self.app.get("/api/v1/requestresponse")
        async def get_request_responses(
            page_number: int = Query(1, description="Page number"),
            page_size: int = Query(10, description="Page size"),
        ):
            """Get all request/response pairs with pagination."""
            correlation_id = get_correlation_id() or str(uuid.uuid4())
            if not self._valid_paging(page_number, page_size):
                self.logger.warning("Bad request: invalid pagination", page_number=page_number, page_size=page_size)
                return JSONResponse(status_code=400, content=error_body(correlation_id, INVALID_PAGING_MESSAGE))

            self.logger.info("Retrieving all request responses", correlation_id=correlation_id)
            response = await self.request_log.get_all(page_number, page_size, correlation_id)
            if not response.is_success:
                return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
            return response.model_dump(mode="json")

        @self.app.get("/api/v1/requestresponse/search")
        async def search_request_responses(
            search_word: Optional[str] = Query(None, description="Word to search for"),
            page_number: int = Query(1, description="Page number"),
            page_size: int = Query(10, description="Page size"),
        ):
            """Search request/response pairs by word with pagination."""
            correlation_id = get_correlation_id() or str(uuid.uuid4())
            if search_word is None or not search_word.strip():
                self.logger.warning("Bad request: Search word cannot be empty")
                return JSONResponse(status_code=400, content=error_body(correlation_id, "Search word cannot be empty"))

            if not self._valid_paging(page_number, page_size):
                self.logger.warning("Bad request: invalid pagination", page_number=page_number, page_size=page_size)
                return JSONResponse(status_code=400, content=error_body(correlation_id, INVALID_PAGING_MESSAGE))

            self.logger.info("Searching request responses by word", search_word=search_word, correlation_id=correlation_id)
            response = await self.request_log.search_by_word(search_word.strip(), page_number, page_size, correlation_id)
            if not response.is_success:
                return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
            return response.model_dump(mode="json")

    @staticmethod
    def _valid_paging(page_number: int, page_size: int) -> bool:
        return page_number >= 1 and 1 <= page_size <= MAX_PAGE_SIZE

    async def _check_dependencies(self):
        """Check word inverser dependencies."""
        dependencies = {}

        try:
            dependencies["postgres"] = "ok" if await self.persistence.health_check() else "error"
        except Exception:
            dependencies["postgres"] = "error"

        dependencies["word_cache"] = "ok" if self.word_cache.is_ready() else self.word_cache.state.value

        return dependencies

    async def start(self):
        """Start components and preload the word cache; a preload failure aborts startup."""
        await self.persistence.start()
        await self.write_back.start()

        loaded = await self.cache_initializer.run()

        self.logger.info("Word inverser service started", cached_words=loaded)

    async def stop(self):
        """Stop word inverser components."""
        await self.write_back.stop()
        await self.persistence.stop()

        self.logger.info("Word inverser service stopped")


def create_app(config: Optional[ServiceConfig] = None):
    """Create word inverser service application."""
    service = WordInverserService(config)
    return service.app


if __name__ == "__main__":
    service = WordInverserService()
    service.run()
