"""Protocol interfaces for decoupling components."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import Email, Query, Summary, Thread


class SummaryProviderError(RuntimeError):
    """Raised when an external summary provider fails to respond usefully."""


class ThreadStore(Protocol):
    """Mutable store of queries, threads, emails and summaries.

    Collections only grow. Callers hold exclusive access for the duration of
    one ingestion or summary call; the store itself does no locking.
    """

    @property
    def queries(self) -> Sequence[Query]:
        """All queries in insertion order."""
        raise NotImplementedError

    @property
    def threads(self) -> Sequence[Thread]:
        """All threads in insertion order."""
        raise NotImplementedError

    @property
    def emails(self) -> Sequence[Email]:
        """All emails in insertion order."""
        raise NotImplementedError

    @property
    def summaries(self) -> Sequence[Summary]:
        """All summaries in insertion order."""
        raise NotImplementedError

    def add_query(self, query: Query) -> None:
        """Append a query record."""
        raise NotImplementedError

    def add_thread(self, thread: Thread) -> None:
        """Append a thread record."""
        raise NotImplementedError

    def add_email(self, email: Email) -> None:
        """Append an email record."""
        raise NotImplementedError

    def add_summary(self, summary: Summary) -> None:
        """Append a summary record."""
        raise NotImplementedError

    def get_query(self, query_id: str) -> Query | None:
        """Return the query with ``query_id`` if stored."""
        raise NotImplementedError

    def get_thread(self, thread_id: str) -> Thread | None:
        """Return the thread with ``thread_id`` if stored."""
        raise NotImplementedError

    def find_thread(self, key: str, query_id: str) -> Thread | None:
        """Return the thread owned by ``query_id`` with grouping ``key``."""
        raise NotImplementedError

    def find_email_by_message_id(self, message_id: str) -> Email | None:
        """Return the email carrying the provider ``message_id``."""
        raise NotImplementedError

    def emails_for_thread(self, thread_id: str) -> list[Email]:
        """Return the emails of a thread in insertion order."""
        raise NotImplementedError

    def summaries_for_thread(self, thread_id: str) -> list[Summary]:
        """Return the summaries of a thread in insertion order."""
        raise NotImplementedError

    def latest_summary(self, thread_id: str) -> Summary | None:
        """Return the most recently created summary of a thread."""
        raise NotImplementedError


class SummaryProvider(Protocol):
    """Produces thread summaries outside the local extractive path."""

    def summarize(
        self, thread: Thread, emails: Sequence[Email]
    ) -> tuple[str, Sequence[str]]:
        """Return summary text and action items for ``thread``."""
        raise NotImplementedError


__all__ = [
    "SummaryProvider",
    "SummaryProviderError",
    "ThreadStore",
]
