"""Thread summaries from an optional external provider with a local fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from inbox_threads.core.config import SummarySettings
from inbox_threads.core.datetime_utils import utc_now
from inbox_threads.core.identifiers import new_id
from inbox_threads.core.interfaces import (
    SummaryProvider,
    SummaryProviderError,
    ThreadStore,
)
from inbox_threads.core.models import Summary, SummarySource, Thread

from .fallback import build_local_summary

LOGGER = logging.getLogger(__name__)


class ThreadSummaryService:
    """Append summaries to a thread's summary log."""

    def __init__(
        self,
        provider: SummaryProvider | None = None,
        *,
        settings: SummarySettings | None = None,
        fallback_enabled: bool | None = None,
    ) -> None:
        """Prepare the service with an optional external provider."""
        self._provider = provider
        self._settings = settings or SummarySettings()
        self._fallback_enabled = (
            self._settings.fallback_enabled
            if fallback_enabled is None
            else fallback_enabled
        )

    def summarize_thread(
        self, store: ThreadStore, thread_id: str, *, now: datetime | None = None
    ) -> Summary | None:
        """Summarise ``thread_id`` and store the result.

        Returns ``None`` for an unknown thread, or when the provider fails
        and the local fallback is disabled.
        """
        thread = store.get_thread(thread_id)
        if thread is None:
            return None
        emails = sorted(store.emails_for_thread(thread.id), key=lambda e: e.sent_at)

        if self._provider is not None:
            try:
                text, action_items = self._provider.summarize(thread, emails)
            except SummaryProviderError as exc:
                LOGGER.warning(
                    "External summary failed for thread %s: %s", thread.id, exc
                )
                if not self._fallback_enabled:
                    return None
            else:
                return self._append(
                    store, thread, text, action_items, SummarySource.EXTERNAL, now
                )

        local = build_local_summary(emails, settings=self._settings)
        return self._append(
            store, thread, local.summary, local.action_items, SummarySource.LOCAL, now
        )

    def record_external_summary(
        self,
        store: ThreadStore,
        thread_id: str,
        summary: str,
        action_items: Sequence[str] = (),
        *,
        now: datetime | None = None,
    ) -> Summary | None:
        """Store a summary delivered back by the external provider."""
        thread = store.get_thread(thread_id)
        if thread is None:
            return None
        return self._append(
            store, thread, summary, action_items, SummarySource.EXTERNAL, now
        )

    @staticmethod
    def _append(
        store: ThreadStore,
        thread: Thread,
        text: str,
        action_items: Sequence[str],
        source: SummarySource,
        now: datetime | None,
    ) -> Summary:
        cleaned_actions = tuple(
            item.strip() for item in action_items if item and item.strip()
        )
        record = Summary(
            id=new_id("s"),
            thread_id=thread.id,
            query_id=thread.query_id,
            summary=str(text or ""),
            action_items=cleaned_actions,
            created_at=now or utc_now(),
            source=source,
        )
        store.add_summary(record)
        LOGGER.debug(
            "Stored %s summary %s for thread %s", source.value, record.id, thread.id
        )
        return record


__all__ = ["ThreadSummaryService"]
