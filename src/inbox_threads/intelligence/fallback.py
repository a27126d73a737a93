"""Deterministic extractive thread summary used without an external provider."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from inbox_threads.core.config import SummarySettings
from inbox_threads.core.datetime_utils import serialize_datetime
from inbox_threads.core.models import NO_SUBJECT, Direction, Email

_ELLIPSIS = "…"


@dataclass(slots=True, frozen=True)
class LocalSummary:
    """Summary text and action items produced by the local summarizer."""

    summary: str
    action_items: tuple[str, ...] = ()


def build_local_summary(
    emails: Sequence[Email], *, settings: SummarySettings | None = None
) -> LocalSummary:
    """Produce a bullet-list summary of a thread from its messages."""
    settings = settings or SummarySettings()
    ordered = sorted(emails, key=lambda email: email.sent_at)

    subject = (ordered[0].subject if ordered else "") or NO_SUBJECT
    latest = serialize_datetime(ordered[-1].sent_at) if ordered else None
    client_count = sum(1 for e in ordered if e.direction is Direction.CLIENT)
    staff_count = sum(1 for e in ordered if e.direction is Direction.STAFF)
    participants = _distinct_participants(ordered)

    lines = [
        f"Subject: {subject}",
        f"Messages: {len(ordered)} (client: {client_count}, staff: {staff_count})",
        f"Latest message at: {latest or 'N/A'}",
    ]
    if participants:
        shown = participants[: settings.max_participants]
        suffix = _ELLIPSIS if len(participants) > len(shown) else ""
        lines.append(f"Participants: {', '.join(shown)}{suffix}")

    snippets = _collect_snippets(ordered)
    recent = snippets[-settings.max_snippets :] if settings.max_snippets else []
    if recent:
        lines.append("Key points (auto-extracted):")
        for snippet in recent:
            lines.append(f"- {_truncate(snippet, settings.snippet_chars)}")

    return LocalSummary(summary="\n".join(lines))


def _distinct_participants(emails: Sequence[Email]) -> list[str]:
    seen: dict[str, None] = {}
    for email in emails:
        for address in (email.sender, *email.to, *email.cc):
            if address:
                seen.setdefault(address, None)
    return list(seen)


def _collect_snippets(emails: Sequence[Email]) -> list[str]:
    snippets = []
    for email in emails:
        text = (email.snippet or email.body_text or "").strip()
        if text:
            snippets.append(text)
    return snippets


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + _ELLIPSIS


__all__ = ["LocalSummary", "build_local_summary"]
