"""Read-side views over queries and threads."""

from __future__ import annotations

from dataclasses import dataclass

from inbox_threads.core.interfaces import ThreadStore
from inbox_threads.core.models import Email, Query, Summary, Thread, ThreadMetrics

from .metrics import compute_response_metrics


@dataclass(slots=True, frozen=True)
class ThreadReport:
    """A thread with its ordered emails, response metrics and current summary."""

    thread: Thread
    emails: tuple[Email, ...]
    metrics: ThreadMetrics
    summary: Summary | None


def list_queries(store: ThreadStore, limit: int = 50) -> list[Query]:
    """Return the most recently created queries first."""
    ordered = sorted(store.queries, key=lambda q: q.created_at, reverse=True)
    return ordered[:limit]


def list_threads(store: ThreadStore, query_id: str | None = None) -> list[Thread]:
    """Return threads, most recently active first, optionally for one query."""
    threads = [t for t in store.threads if query_id is None or t.query_id == query_id]
    return sorted(threads, key=lambda t: t.last_at, reverse=True)


def build_thread_report(store: ThreadStore, thread_id: str) -> ThreadReport | None:
    """Assemble the detail view of a thread, or ``None`` if it is unknown."""
    thread = store.get_thread(thread_id)
    if thread is None:
        return None
    emails = tuple(sorted(store.emails_for_thread(thread.id), key=lambda e: e.sent_at))
    return ThreadReport(
        thread=thread,
        emails=emails,
        metrics=compute_response_metrics(emails),
        summary=store.latest_summary(thread.id),
    )


__all__ = ["ThreadReport", "build_thread_report", "list_queries", "list_threads"]
