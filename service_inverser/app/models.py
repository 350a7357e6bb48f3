"""
Data models for the Word Inverser service.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from math import ceil
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field

MAX_WORD_LENGTH = 500
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WordRecord:
    """Durable word mapping row."""
    word: str
    inversed_word: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class RequestResponseRecord:
    """Audit log row for one API call."""
    request: str
    response: str
    tags: List[str] = field(default_factory=list)
    is_success: bool = True
    exception: Optional[str] = None
    processing_time_ms: Optional[int] = None
    request_id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    id: Optional[int] = None


@dataclass
class TransformResult:
    """Outcome of a sentence transformation."""
    correlation_id: str
    sentence: str = ""
    processing_time_ms: int = 0
    success: bool = True
    error_message: Optional[str] = None
    errors: List[str] = field(default_factory=list)


class BaseResponse(BaseModel):
    """Common envelope for API responses."""
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    response_time: datetime = Field(default_factory=_utcnow, description="Response timestamp (UTC)")
    is_success: bool = Field(True, description="Whether the request succeeded")
    error_message: Optional[str] = Field(None, description="Human readable error")
    errors: List[str] = Field(default_factory=list, description="Error details")


class InverseWordsRequest(BaseModel):
    """Request model for sentence inversion."""
    sentence: Optional[str] = Field(None, description="Sentence whose words are inverted")
    correlation_id: Optional[UUID] = Field(None, description="Caller supplied correlation ID")
    request_time: datetime = Field(default_factory=_utcnow, description="Request timestamp (UTC)")


class InverseWordsResponse(BaseResponse):
    """Response model for sentence inversion."""
    inversed_sentence: str = Field("", description="Sentence with every word inverted")
    processing_time_ms: int = Field(0, description="Processing time in milliseconds")

    @classmethod
    def from_result(cls, result: TransformResult) -> "InverseWordsResponse":
        return cls(
            correlation_id=result.correlation_id,
            is_success=result.success,
            error_message=result.error_message,
            errors=result.errors,
            inversed_sentence=result.sentence,
            processing_time_ms=result.processing_time_ms,
        )


class RequestResponseDto(BaseModel):
    """Audit log entry as returned by the API."""
    id: Optional[int] = None
    request_id: UUID
    request: str
    response: str
    tags: List[str] = Field(default_factory=list)
    exception: Optional[str] = None
    is_success: bool
    created_date: datetime
    processing_time_ms: Optional[int] = None

    @classmethod
    def from_record(cls, record: RequestResponseRecord) -> "RequestResponseDto":
        return cls(
            id=record.id,
            request_id=record.request_id,
            request=record.request,
            response=record.response,
            tags=record.tags,
            exception=record.exception,
            is_success=record.is_success,
            created_date=record.created_at,
            processing_time_ms=record.processing_time_ms,
        )


class PagedResponse(BaseResponse, Generic[T]):
    """Paginated response envelope."""
    data: List[T] = Field(default_factory=list)
    page_number: int = 1
    page_size: int = 10
    total_records: int = 0

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return ceil(self.total_records / self.page_size)

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


def error_body(correlation_id: Optional[str], message: str, errors: Optional[List[str]] = None) -> Dict[str, Any]:
    """Build the failure envelope used by the API routes."""
    return BaseResponse(
        correlation_id=correlation_id,
        is_success=False,
        error_message=message,
        errors=errors if errors is not None else [message],
    ).model_dump(mode="json")
