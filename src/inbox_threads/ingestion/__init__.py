"""Ingestion pipeline components."""

from .engine import ingest_batch
from .raw import RawMessage, ResultsBatch
from .results import (
    mark_query_failed,
    parse_results_payload,
    record_results,
    register_query,
)

__all__ = [
    "RawMessage",
    "ResultsBatch",
    "ingest_batch",
    "mark_query_failed",
    "parse_results_payload",
    "record_results",
    "register_query",
]
