"""In-memory thread store implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.interfaces import ThreadStore
from ..core.models import Email, Query, Summary, Thread

LOGGER = logging.getLogger(__name__)


class InMemoryThreadStore(ThreadStore):
    """Keep queries, threads, emails and summaries in ordered lists."""

    def __init__(self) -> None:
        """Initialise empty collections and lookup indexes."""
        self._queries: list[Query] = []
        self._threads: list[Thread] = []
        self._emails: list[Email] = []
        self._summaries: list[Summary] = []
        self._emails_by_message_id: dict[str, Email] = {}

    # Collections -------------------------------------------------------------
    @property
    def queries(self) -> Sequence[Query]:
        """All queries in insertion order."""
        return tuple(self._queries)

    @property
    def threads(self) -> Sequence[Thread]:
        """All threads in insertion order."""
        return tuple(self._threads)

    @property
    def emails(self) -> Sequence[Email]:
        """All emails in insertion order."""
        return tuple(self._emails)

    @property
    def summaries(self) -> Sequence[Summary]:
        """All summaries in insertion order."""
        return tuple(self._summaries)

    # Mutation ----------------------------------------------------------------
    def add_query(self, query: Query) -> None:
        """Append a query record."""
        self._queries.append(query)

    def add_thread(self, thread: Thread) -> None:
        """Append a thread record."""
        self._threads.append(thread)

    def add_email(self, email: Email) -> None:
        """Append an email record and index its provider message id."""
        if email.message_id:
            if email.message_id in self._emails_by_message_id:
                raise ValueError(f"Duplicate message id {email.message_id!r}")
            self._emails_by_message_id[email.message_id] = email
        self._emails.append(email)
        LOGGER.debug("Stored email %s in thread %s", email.id, email.thread_id)

    def add_summary(self, summary: Summary) -> None:
        """Append a summary record."""
        self._summaries.append(summary)

    # Lookups -----------------------------------------------------------------
    def get_query(self, query_id: str) -> Query | None:
        """Return the query with ``query_id`` if stored."""
        return next((q for q in self._queries if q.id == query_id), None)

    def get_thread(self, thread_id: str) -> Thread | None:
        """Return the thread with ``thread_id`` if stored."""
        return next((t for t in self._threads if t.id == thread_id), None)

    def find_thread(self, key: str, query_id: str) -> Thread | None:
        """Return the thread owned by ``query_id`` with grouping ``key``."""
        return next(
            (t for t in self._threads if t.key == key and t.query_id == query_id),
            None,
        )

    def find_email_by_message_id(self, message_id: str) -> Email | None:
        """Return the email carrying the provider ``message_id``."""
        if not message_id:
            return None
        return self._emails_by_message_id.get(message_id)

    def emails_for_thread(self, thread_id: str) -> list[Email]:
        """Return the emails of a thread in insertion order."""
        return [email for email in self._emails if email.thread_id == thread_id]

    def summaries_for_thread(self, thread_id: str) -> list[Summary]:
        """Return the summaries of a thread in insertion order."""
        return [s for s in self._summaries if s.thread_id == thread_id]

    def latest_summary(self, thread_id: str) -> Summary | None:
        """Return the most recently created summary of a thread."""
        summaries = self.summaries_for_thread(thread_id)
        if not summaries:
            return None
        # Equal timestamps resolve to the later insert.
        latest = summaries[0]
        for summary in summaries[1:]:
            if summary.created_at >= latest.created_at:
                latest = summary
        return latest


__all__ = ["InMemoryThreadStore"]
