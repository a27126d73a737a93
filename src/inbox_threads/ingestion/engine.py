"""Assign incoming messages to threads and store them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from ..core.datetime_utils import INVALID_TIMESTAMP, parse_timestamp, utc_now
from ..core.identifiers import new_id
from ..core.interfaces import ThreadStore
from ..core.models import NO_SUBJECT, Email, IngestResult, Thread
from .direction import classify_direction
from .normalize import collect_participants, normalize_address, normalize_subject
from .raw import RawMessage
from .thread_keys import thread_key_for

LOGGER = logging.getLogger(__name__)

DEFAULT_SNIPPET_LIMIT = 500


def ingest_batch(
    store: ThreadStore,
    query_id: str,
    raw_messages: Iterable[RawMessage | dict[str, Any]],
    *,
    staff_domain: str,
    snippet_limit: int = DEFAULT_SNIPPET_LIMIT,
    now: datetime | None = None,
) -> IngestResult:
    """Deduplicate, thread and store one batch of messages for ``query_id``.

    Messages are handled in input order. A message whose timestamp cannot
    be parsed is skipped. A message whose provider id is already stored is
    not inserted again, but its existing thread still counts as touched.
    Threads are looked up by key within ``query_id`` only.
    """
    created_at = now or utc_now()
    created_email_ids: list[str] = []
    # dict keeps first-touch order while de-duplicating
    touched: dict[str, None] = {}
    skipped = 0
    duplicates = 0

    for position, payload in enumerate(raw_messages):
        message = _coerce_message(payload, position)
        if message is None:
            skipped += 1
            continue

        sent_at = parse_timestamp(message.sent_at)
        if sent_at is INVALID_TIMESTAMP:
            LOGGER.debug(
                "Skipping message %r at position %s: invalid timestamp %r",
                message.message_id,
                position,
                message.sent_at,
            )
            skipped += 1
            continue

        sender = normalize_address(message.sender)
        to = tuple(normalize_address(address) for address in message.to)
        cc = tuple(normalize_address(address) for address in message.cc)
        direction = classify_direction(sender, staff_domain)

        if message.message_id:
            existing = store.find_email_by_message_id(message.message_id)
            if existing is not None:
                touched[existing.thread_id] = None
                duplicates += 1
                continue

        participants = collect_participants(sender, to, cc)
        subject = normalize_subject(message.subject)
        key = thread_key_for(message.conversation_id, message.subject, participants)

        thread = store.find_thread(key, query_id)
        if thread is None:
            thread = Thread(
                id=new_id("t"),
                query_id=query_id,
                key=key,
                conversation_id=message.conversation_id,
                subject=subject or NO_SUBJECT,
                participants=participants,
                first_at=sent_at,
                last_at=sent_at,
                created_at=created_at,
            )
            store.add_thread(thread)
            LOGGER.debug("Created thread %s for key %s", thread.id, key)
        else:
            _extend_thread(thread, sent_at, participants, subject)

        email = Email(
            id=new_id("m"),
            query_id=query_id,
            thread_id=thread.id,
            message_id=message.message_id or None,
            conversation_id=message.conversation_id,
            subject=message.subject,
            normalized_subject=subject,
            sender=sender,
            to=to,
            cc=cc,
            sent_at=sent_at,
            snippet=message.snippet[:snippet_limit],
            body_text=message.body_text,
            body_html=message.body_html,
            direction=direction,
            created_at=created_at,
        )
        store.add_email(email)
        created_email_ids.append(email.id)
        touched[thread.id] = None

    LOGGER.info(
        "Ingested batch for query %s: created=%s, duplicates=%s, skipped=%s, threads=%s",
        query_id,
        len(created_email_ids),
        duplicates,
        skipped,
        len(touched),
    )
    return IngestResult(
        created_email_ids=tuple(created_email_ids),
        touched_thread_ids=tuple(touched),
    )


def _coerce_message(
    payload: RawMessage | dict[str, Any], position: int
) -> RawMessage | None:
    if isinstance(payload, RawMessage):
        return payload
    try:
        return RawMessage.model_validate(payload)
    except ValidationError as exc:
        LOGGER.warning(
            "Skipping malformed message at position %s: %s", position, exc
        )
        return None


def _extend_thread(
    thread: Thread,
    sent_at: datetime,
    participants: tuple[str, ...],
    subject: str,
) -> None:
    """Widen the window, merge participants and fill a missing subject."""
    if sent_at < thread.first_at:
        thread.first_at = sent_at
    if sent_at > thread.last_at:
        thread.last_at = sent_at
    thread.participants = tuple(sorted({*thread.participants, *participants}))
    if subject and thread.subject in ("", NO_SUBJECT):
        thread.subject = subject


__all__ = ["DEFAULT_SNIPPET_LIMIT", "ingest_batch"]
