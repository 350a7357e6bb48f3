"""
Request/response audit middleware.

Every call under ``/api`` is recorded with its raw request and response
bodies, timing, outcome, and the distinct words of the request sentence as
search tags. Audit failures are logged and never affect the response.
"""

import json
import time
import traceback
from typing import List, Optional, TYPE_CHECKING

from fastapi import Request
from starlette.responses import Response

from shared.logging import get_logger
from ..models import RequestResponseRecord

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..persistence.postgres import PostgreSQLPersistence


AUDITED_PATH_PREFIX = "/api"


def extract_tags(request_body: str) -> List[str]:
    """Return the distinct non-empty words of the ``sentence`` field of a JSON body."""
    if not request_body or request_body.isspace():
        return []

    try:
        payload = json.loads(request_body)
    except ValueError:
        return []

    if not isinstance(payload, dict):
        return []

    sentence = payload.get("sentence")
    if not isinstance(sentence, str) or not sentence.strip():
        return []

    tags: List[str] = []
    for word in sentence.split(" "):
        word = word.strip()
        if word and word not in tags:
            tags.append(word)
    return tags


class RequestResponseLogger:
    """Captures API request/response pairs into the audit log."""

    def __init__(self, store: "PostgreSQLPersistence", *, enabled: bool = True):
        self.store = store
        self.enabled = enabled
        self.logger = get_logger("inverser.audit.request_log")

    def should_log(self, request: Request) -> bool:
        return self.enabled and request.url.path.startswith(AUDITED_PATH_PREFIX)

    async def __call__(self, request: Request, call_next) -> Response:
        if not self.should_log(request):
            return await call_next(request)

        start = time.perf_counter()
        request_body = (await request.body()).decode("utf-8", errors="replace")

        try:
            response = await call_next(request)
        except Exception as exc:
            await self.save(request_body, "", time.perf_counter() - start, 500, exc)
            raise

        response_bytes = b""
        async for chunk in response.body_iterator:
            response_bytes += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        await self.save(
            request_body,
            response_bytes.decode("utf-8", errors="replace"),
            time.perf_counter() - start,
            response.status_code,
        )

        return Response(
            content=response_bytes,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

    async def save(
        self,
        request_body: str,
        response_body: str,
        duration: float,
        status_code: int,
        exception: Optional[BaseException] = None,
    ) -> Optional[int]:
        """Persist one audit record; returns its id, or None when saving failed."""
        try:
            record = RequestResponseRecord(
                request=request_body,
                response=response_body,
                tags=extract_tags(request_body),
                exception="".join(traceback.format_exception(exception)) if exception else None,
                is_success=exception is None and 200 <= status_code < 300,
                processing_time_ms=int(duration * 1000),
            )
            record_id = await self.store.add_request_response(record)

            self.logger.info("Request/Response logged successfully", request_id=str(record.request_id))
            return record_id

        except Exception as e:
            self.logger.error("Error saving request/response to database", error=str(e))
            return None
