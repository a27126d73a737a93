"""Grouping keys that decide which thread a message belongs to."""

from __future__ import annotations

from collections.abc import Iterable

from .normalize import normalize_subject, stable_hash

CONVERSATION_PREFIX = "conv:"
FALLBACK_PREFIX = "fallback:"


def thread_key_for(
    conversation_id: str | None,
    subject: str | None,
    participants: Iterable[str],
) -> str:
    """Return the thread key for a message.

    The provider conversation id wins when present. Otherwise the key is a
    hash over the normalized subject and the sorted participant addresses,
    so replaying the same message always yields the same key.
    """
    if conversation_id:
        return f"{CONVERSATION_PREFIX}{conversation_id}"
    material = normalize_subject(subject) + "|" + ",".join(sorted(participants))
    return f"{FALLBACK_PREFIX}{stable_hash(material)}"


__all__ = ["CONVERSATION_PREFIX", "FALLBACK_PREFIX", "thread_key_for"]
