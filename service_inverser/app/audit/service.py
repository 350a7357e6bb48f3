"""
Paginated listing and word search over the request/response audit log.
"""

from typing import Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..models import PagedResponse, RequestResponseDto

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..persistence.postgres import PostgreSQLPersistence


class RequestLogService:
    """Reads audit entries back out of the store."""

    def __init__(self, store: "PostgreSQLPersistence"):
        self.store = store
        self.logger = get_logger("inverser.audit.service")

    async def get_all(
        self,
        page_number: int,
        page_size: int,
        correlation_id: Optional[str] = None,
    ) -> PagedResponse[RequestResponseDto]:
        """Return one page of audit entries, newest first."""
        try:
            records, total = await self.store.get_request_responses(page_number, page_size)
        except Exception as e:
            self.logger.error("Error retrieving all request responses", error=str(e))
            return PagedResponse[RequestResponseDto](
                correlation_id=correlation_id,
                is_success=False,
                error_message="An error occurred while retrieving request responses",
                errors=[str(e)],
                page_number=page_number,
                page_size=page_size,
            )

        return PagedResponse[RequestResponseDto](
            correlation_id=correlation_id,
            data=[RequestResponseDto.from_record(record) for record in records],
            page_number=page_number,
            page_size=page_size,
            total_records=total,
        )

    async def search_by_word(
        self,
        search_word: str,
        page_number: int,
        page_size: int,
        correlation_id: Optional[str] = None,
    ) -> PagedResponse[RequestResponseDto]:
        """Return one page of audit entries tagged with ``search_word``."""
        try:
            records, total = await self.store.search_request_responses(search_word, page_number, page_size)
        except Exception as e:
            self.logger.error("Error searching request responses by word", search_word=search_word, error=str(e))
            return PagedResponse[RequestResponseDto](
                correlation_id=correlation_id,
                is_success=False,
                error_message="An error occurred while searching request responses",
                errors=[str(e)],
                page_number=page_number,
                page_size=page_size,
            )

        return PagedResponse[RequestResponseDto](
            correlation_id=correlation_id,
            data=[RequestResponseDto.from_record(record) for record in records],
            page_number=page_number,
            page_size=page_size,
            total_records=total,
        )
