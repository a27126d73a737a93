"""Core domain models used across the application."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class QueryStatus(str, enum.Enum):
    """Lifecycle of a search query."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


class Direction(str, enum.Enum):
    """Whether a message was sent by the organisation or by a client."""

    STAFF = "staff"
    CLIENT = "client"


class SummarySource(str, enum.Enum):
    """Provenance of a stored thread summary."""

    LOCAL = "local"
    EXTERNAL = "external"


NO_SUBJECT = "(no subject)"


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class Query:
    """One search request and the counters of results reported for it."""

    id: str
    keyword: str
    date_from: str | None
    date_to: str | None
    max_results: int
    status: QueryStatus
    created_at: datetime
    updated_at: datetime
    received_count: int = 0
    created_messages: int = 0
    error: str | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class Thread:
    """A group of emails treated as one conversation within a query."""

    id: str
    query_id: str
    key: str
    conversation_id: str | None
    subject: str
    participants: tuple[str, ...]
    first_at: datetime
    last_at: datetime
    created_at: datetime


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True, frozen=True)
class Email:
    """Normalized message stored after ingestion."""

    id: str
    query_id: str
    thread_id: str
    message_id: str | None
    conversation_id: str | None
    subject: str
    normalized_subject: str
    sender: str
    to: tuple[str, ...]
    cc: tuple[str, ...]
    sent_at: datetime
    snippet: str
    body_text: str
    body_html: str
    direction: Direction
    created_at: datetime


@dataclass(slots=True, frozen=True)
class Summary:
    """Summary text generated for a thread; never edited once stored."""

    id: str
    thread_id: str
    query_id: str
    summary: str
    action_items: tuple[str, ...]
    created_at: datetime
    source: SummarySource


@dataclass(slots=True, frozen=True)
class ResponseMetric:
    """Latency between a client message and the staff reply that followed."""

    client_message_id: str
    staff_reply_id: str | None
    response_seconds: int | None


@dataclass(slots=True, frozen=True)
class ThreadMetrics:
    """Per-client response metrics with their average."""

    per_client: tuple[ResponseMetric, ...]
    average_seconds: int | None


@dataclass(slots=True, frozen=True)
class IngestResult:
    """Outcome of ingesting one batch of raw messages."""

    created_email_ids: tuple[str, ...]
    touched_thread_ids: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ResultsOutcome:
    """Outcome of applying a provider results batch to a query."""

    ok: bool
    error: str | None = None
    created_email_ids: tuple[str, ...] = field(default_factory=tuple)
    touched_thread_ids: tuple[str, ...] = field(default_factory=tuple)


__all__ = [
    "Direction",
    "Email",
    "IngestResult",
    "NO_SUBJECT",
    "Query",
    "QueryStatus",
    "ResponseMetric",
    "ResultsOutcome",
    "Summary",
    "SummarySource",
    "Thread",
    "ThreadMetrics",
]
