"""
PostgreSQL persistence layer for the Word Inverser service.
"""

import json
from typing import Any, List, Optional, Tuple

import asyncpg

from shared.logging import get_logger
from shared.errors import PersistenceError, ValidationError
from ..models import MAX_WORD_LENGTH, RequestResponseRecord, WordRecord


class PostgreSQLPersistence:
    """PostgreSQL persistence for the word mapping and the request/response log."""

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.logger = get_logger("inverser.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout
            )

            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise PersistenceError("start", str(e)) from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    def _require_pool(self, operation: str) -> asyncpg.Pool:
        if self.pool is None:
            raise PersistenceError(operation, "persistence layer not started")
        return self.pool

    async def _create_tables(self):
        """Create database tables."""
        async with self._require_pool("create_tables").acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS word_cache (
                    id BIGSERIAL PRIMARY KEY,
                    word VARCHAR({MAX_WORD_LENGTH}) NOT NULL,
                    inversed_word VARCHAR({MAX_WORD_LENGTH}) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS ix_word_cache_word ON word_cache(word);
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS request_response (
                    id BIGSERIAL PRIMARY KEY,
                    request_id UUID NOT NULL UNIQUE,
                    request TEXT NOT NULL,
                    response TEXT NOT NULL,
                    tags JSONB NOT NULL DEFAULT '[]',
                    exception TEXT,
                    is_success BOOLEAN NOT NULL DEFAULT TRUE,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    processing_time_ms BIGINT
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS ix_request_response_created_at ON request_response(created_at DESC);
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS ix_request_response_is_success ON request_response(is_success);
            """)

    # Word mapping

    async def read_word_page(self, page_number: int, page_size: int) -> List[WordRecord]:
        """Read one page (1-based) of the word mapping, ordered by insertion."""
        if page_number < 1 or page_size < 1:
            raise ValidationError(
                "page_number and page_size must be positive",
                details={"page_number": page_number, "page_size": page_size},
            )

        try:
            async with self._require_pool("read_word_page").acquire() as conn:
                rows = await conn.fetch("""
                    SELECT word, inversed_word, created_at, updated_at
                    FROM word_cache
                    ORDER BY id
                    LIMIT $1 OFFSET $2
                """, page_size, (page_number - 1) * page_size)

                return [self._row_to_word(row) for row in rows]

        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error("Error reading word page", page_number=page_number, error=str(e))
            raise PersistenceError("read_word_page", str(e)) from e

    async def upsert_word(self, word: str, inversed_word: str) -> None:
        """Insert a word mapping, or update it when the word already exists."""
        try:
            async with self._require_pool("upsert_word").acquire() as conn:
                await conn.execute("""
                    INSERT INTO word_cache (word, inversed_word, created_at, updated_at)
                    VALUES ($1, $2, NOW(), NOW())
                    ON CONFLICT (word) DO UPDATE SET
                        inversed_word = EXCLUDED.inversed_word,
                        updated_at = NOW()
                """, word, inversed_word)

        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error("Error upserting word", word=word, error=str(e))
            raise PersistenceError("upsert_word", str(e)) from e

    # Request/response log

    async def add_request_response(self, record: RequestResponseRecord) -> int:
        """Persist an audit log entry and return its id."""
        try:
            async with self._require_pool("add_request_response").acquire() as conn:
                return await conn.fetchval("""
                    INSERT INTO request_response (
                        request_id, request, response, tags, exception,
                        is_success, created_at, processing_time_ms
                    ) VALUES ($1, $2, $3, $4::jsonb, $5, $6, $7, $8)
                    RETURNING id
                """,
                    record.request_id, record.request, record.response,
                    json.dumps(record.tags), record.exception, record.is_success,
                    record.created_at, record.processing_time_ms
                )

        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error("Error saving request/response", request_id=str(record.request_id), error=str(e))
            raise PersistenceError("add_request_response", str(e)) from e

    async def get_request_responses(self, page_number: int, page_size: int) -> Tuple[List[RequestResponseRecord], int]:
        """Return one page of audit entries (newest first) and the total count."""
        try:
            async with self._require_pool("get_request_responses").acquire() as conn:
                rows = await conn.fetch("""
                    SELECT * FROM request_response
                    ORDER BY created_at DESC, id DESC
                    LIMIT $1 OFFSET $2
                """, page_size, (page_number - 1) * page_size)
                total = await conn.fetchval("SELECT COUNT(*) FROM request_response")

                return [self._row_to_request_response(row) for row in rows], total

        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error("Error reading request/responses", error=str(e))
            raise PersistenceError("get_request_responses", str(e)) from e

    async def search_request_responses(
        self,
        search_word: str,
        page_number: int,
        page_size: int
    ) -> Tuple[List[RequestResponseRecord], int]:
        """Return one page of audit entries whose tags contain ``search_word`` (case-insensitive)."""
        pattern = f"%{self._escape_like(search_word)}%"
        where = """
            WHERE EXISTS (
                SELECT 1 FROM jsonb_array_elements_text(tags) AS tag
                WHERE tag ILIKE $1 ESCAPE '\\'
            )
        """
        try:
            async with self._require_pool("search_request_responses").acquire() as conn:
                rows = await conn.fetch(f"""
                    SELECT * FROM request_response
                    {where}
                    ORDER BY created_at DESC, id DESC
                    LIMIT $2 OFFSET $3
                """, pattern, page_size, (page_number - 1) * page_size)
                total = await conn.fetchval(f"SELECT COUNT(*) FROM request_response {where}", pattern)

                return [self._row_to_request_response(row) for row in rows], total

        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error("Error searching request/responses", search_word=search_word, error=str(e))
            raise PersistenceError("search_request_responses", str(e)) from e

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self._require_pool("health_check").acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            self.logger.error("PostgreSQL health check failed", error=str(e))
            return False

    @staticmethod
    def _escape_like(value: str) -> str:
        return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    @staticmethod
    def _row_to_word(row: Any) -> WordRecord:
        return WordRecord(
            word=row["word"],
            inversed_word=row["inversed_word"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_request_response(row: Any) -> RequestResponseRecord:
        tags = row["tags"]
        if isinstance(tags, str):
            tags = json.loads(tags)
        return RequestResponseRecord(
            id=row["id"],
            request_id=row["request_id"],
            request=row["request"],
            response=row["response"],
            tags=list(tags or []),
            exception=row["exception"],
            is_success=row["is_success"],
            created_at=row["created_at"],
            processing_time_ms=row["processing_time_ms"],
        )
