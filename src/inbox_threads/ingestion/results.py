"""Query lifecycle and application of provider result batches."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from ..core.config import AppSettings
from ..core.datetime_utils import utc_now
from ..core.identifiers import new_id
from ..core.interfaces import ThreadStore
from ..core.models import Query, QueryStatus, ResultsOutcome
from .engine import ingest_batch
from .raw import ResultsBatch

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50
MIN_KEYWORD_LENGTH = 2
UNKNOWN_QUERY_ERROR = "Unknown queryId"


def register_query(
    store: ThreadStore,
    keyword: str,
    *,
    date_from: str | None = None,
    date_to: str | None = None,
    max_results: int | None = None,
    query_id: str | None = None,
    now: datetime | None = None,
) -> Query:
    """Create a pending query for a new search request."""
    cleaned = (keyword or "").strip()
    if len(cleaned) < MIN_KEYWORD_LENGTH:
        raise ValueError(
            f"Keyword is required (min {MIN_KEYWORD_LENGTH} characters)."
        )
    timestamp = now or utc_now()
    query = Query(
        id=query_id or new_id("q"),
        keyword=cleaned,
        date_from=date_from or None,
        date_to=date_to or None,
        max_results=max_results or DEFAULT_MAX_RESULTS,
        status=QueryStatus.PENDING,
        created_at=timestamp,
        updated_at=timestamp,
    )
    store.add_query(query)
    LOGGER.info("Registered query %s for keyword %r", query.id, query.keyword)
    return query


def mark_query_failed(
    store: ThreadStore, query_id: str, error: str, *, now: datetime | None = None
) -> Query | None:
    """Record that the search trigger for ``query_id`` failed."""
    query = store.get_query(query_id)
    if query is None:
        return None
    query.status = QueryStatus.FAILED
    query.error = error
    query.updated_at = now or utc_now()
    LOGGER.warning("Query %s failed: %s", query_id, error)
    return query


def parse_results_payload(body: Any) -> ResultsBatch:
    """Validate a results payload, unwrapping JSON-encoded forms.

    Providers sometimes post the batch as a JSON string, or as a mapping
    whose ``payload`` member is a JSON string. Raises
    :class:`pydantic.ValidationError` when ``queryId`` is missing or
    ``emails`` is not a list, and :class:`ValueError` for undecodable JSON.
    """
    if isinstance(body, (str, bytes)):
        body = _decode_json(body)
    if isinstance(body, Mapping) and isinstance(body.get("payload"), str):
        body = _decode_json(body["payload"])
    return ResultsBatch.model_validate(body)


def record_results(
    store: ThreadStore,
    batch: ResultsBatch,
    *,
    settings: AppSettings,
    now: datetime | None = None,
) -> ResultsOutcome:
    """Ingest ``batch`` into its query and update the query counters.

    An unknown query id refuses the whole batch without touching the store.
    """
    query = store.get_query(batch.query_id)
    if query is None:
        LOGGER.warning("Refusing results for unknown query %s", batch.query_id)
        return ResultsOutcome(ok=False, error=UNKNOWN_QUERY_ERROR)

    timestamp = now or utc_now()
    result = ingest_batch(
        store,
        query.id,
        batch.emails,
        staff_domain=settings.staff.domain,
        snippet_limit=settings.ingestion.snippet_max_chars,
        now=timestamp,
    )

    query.status = QueryStatus.COMPLETE
    query.updated_at = timestamp
    query.received_count += len(batch.emails)
    query.created_messages += len(result.created_email_ids)

    return ResultsOutcome(
        ok=True,
        created_email_ids=result.created_email_ids,
        touched_thread_ids=result.touched_thread_ids,
    )


def _decode_json(raw: str | bytes) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Results payload is not valid JSON") from exc


__all__ = [
    "DEFAULT_MAX_RESULTS",
    "UNKNOWN_QUERY_ERROR",
    "mark_query_failed",
    "parse_results_payload",
    "record_results",
    "register_query",
]
