"""Derived views over stored threads: metrics, summaries and reports."""

from inbox_threads.core.interfaces import SummaryProviderError

from .fallback import LocalSummary, build_local_summary
from .metrics import compute_response_metrics
from .report import ThreadReport, build_thread_report, list_queries, list_threads
from .summarizer import ThreadSummaryService

__all__ = [
    "LocalSummary",
    "SummaryProviderError",
    "ThreadReport",
    "ThreadSummaryService",
    "build_local_summary",
    "build_thread_report",
    "compute_response_metrics",
    "list_queries",
    "list_threads",
]
