"""Tests for thread assignment and deduplication during ingestion."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from inbox_threads.core.models import NO_SUBJECT, Direction
from inbox_threads.ingestion import RawMessage, ingest_batch
from inbox_threads.storage import InMemoryThreadStore

STAFF_DOMAIN = "futuregate.info"


def _raw(
    message_id: str | None,
    sent_at: str,
    *,
    sender: str = "client@client.org",
    to: tuple[str, ...] = ("agent@futuregate.info",),
    cc: tuple[str, ...] = (),
    subject: str = "Hello",
    conversation_id: str | None = None,
    snippet: str = "",
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "subject": subject,
        "from": sender,
        "to": list(to),
        "cc": list(cc),
        "sentAt": sent_at,
        "snippet": snippet,
    }
    if message_id is not None:
        payload["messageId"] = message_id
    if conversation_id is not None:
        payload["conversationId"] = conversation_id
    return payload


def _ingest(store: InMemoryThreadStore, query_id: str, messages: list[Any]):
    return ingest_batch(store, query_id, messages, staff_domain=STAFF_DOMAIN)


@pytest.fixture
def store() -> InMemoryThreadStore:
    return InMemoryThreadStore()


def test_new_messages_create_thread_and_emails(store: InMemoryThreadStore) -> None:
    result = _ingest(
        store,
        "q_1",
        [
            _raw("m1", "2024-01-01T10:00:00Z", conversation_id="c1"),
            _raw(
                "m2",
                "2024-01-01T10:05:00Z",
                sender="Agent@FutureGate.info",
                to=("client@client.org",),
                subject="RE: Hello",
                conversation_id="c1",
            ),
        ],
    )

    assert len(result.created_email_ids) == 2
    assert len(result.touched_thread_ids) == 1
    assert len(store.threads) == 1
    thread = store.threads[0]
    assert thread.id == result.touched_thread_ids[0]
    assert thread.key == "conv:c1"
    assert thread.conversation_id == "c1"
    assert thread.query_id == "q_1"
    assert thread.subject == "Hello"
    assert thread.participants == ("agent@futuregate.info", "client@client.org")

    client_email, staff_email = store.emails
    assert client_email.direction is Direction.CLIENT
    assert staff_email.direction is Direction.STAFF
    assert staff_email.sender == "agent@futuregate.info"
    assert staff_email.subject == "RE: Hello"
    assert staff_email.normalized_subject == "Hello"
    assert {e.thread_id for e in store.emails} == {thread.id}


def test_reingesting_same_batch_is_idempotent(store: InMemoryThreadStore) -> None:
    batch = [
        _raw("m1", "2024-01-01T10:00:00Z"),
        _raw("m2", "2024-01-01T11:00:00Z", subject="Another topic"),
    ]

    first = _ingest(store, "q_1", batch)
    second = _ingest(store, "q_1", batch)

    assert len(first.created_email_ids) == 2
    assert second.created_email_ids == ()
    assert len(store.emails) == 2
    assert len(store.threads) == 2
    assert second.touched_thread_ids
    assert set(second.touched_thread_ids) == set(first.touched_thread_ids)


def test_duplicate_within_one_batch_is_inserted_once(store: InMemoryThreadStore) -> None:
    result = _ingest(
        store,
        "q_1",
        [_raw("m1", "2024-01-01T10:00:00Z"), _raw("m1", "2024-01-01T10:00:00Z")],
    )

    assert len(result.created_email_ids) == 1
    assert len(result.touched_thread_ids) == 1


def test_messages_without_id_are_always_inserted(store: InMemoryThreadStore) -> None:
    batch = [_raw(None, "2024-01-01T10:00:00Z"), _raw("", "2024-01-01T10:00:00Z")]

    _ingest(store, "q_1", batch)
    _ingest(store, "q_1", batch)

    assert len(store.emails) == 4
    assert all(email.message_id is None for email in store.emails)
    assert len(store.threads) == 1


def test_invalid_timestamps_are_skipped(store: InMemoryThreadStore) -> None:
    result = _ingest(
        store,
        "q_1",
        [
            _raw("bad", "yesterday-ish"),
            {"messageId": "none", "from": "client@client.org"},
            _raw("good", "2024-01-01T10:00:00Z"),
        ],
    )

    assert len(result.created_email_ids) == 1
    assert [email.message_id for email in store.emails] == ["good"]


def test_malformed_payloads_are_skipped(store: InMemoryThreadStore) -> None:
    result = _ingest(store, "q_1", ["not a message", _raw("m1", "2024-01-01T10:00:00Z")])

    assert len(result.created_email_ids) == 1


def test_validated_messages_are_accepted(store: InMemoryThreadStore) -> None:
    message = RawMessage.model_validate(_raw("m1", "2024-01-01T10:00:00Z"))

    result = _ingest(store, "q_1", [message])

    assert len(result.created_email_ids) == 1


def test_thread_window_tracks_min_and_max(store: InMemoryThreadStore) -> None:
    _ingest(
        store,
        "q_1",
        [
            _raw("m2", "2024-01-02T10:00:00Z", conversation_id="c1"),
            _raw("m1", "2024-01-01T08:00:00Z", conversation_id="c1"),
        ],
    )
    _ingest(
        store,
        "q_1",
        [
            _raw("m3", "2024-01-01T12:00:00Z", conversation_id="c1"),
            _raw("m4", "2024-01-03T09:30:00Z", conversation_id="c1"),
        ],
    )

    for thread in store.threads:
        sent = [e.sent_at for e in store.emails_for_thread(thread.id)]
        assert thread.first_at <= thread.last_at
        assert thread.first_at == min(sent)
        assert thread.last_at == max(sent)
    thread = store.threads[0]
    assert thread.first_at == datetime(2024, 1, 1, 8, 0, tzinfo=UTC)
    assert thread.last_at == datetime(2024, 1, 3, 9, 30, tzinfo=UTC)


def test_participants_only_grow(store: InMemoryThreadStore) -> None:
    _ingest(
        store,
        "q_1",
        [_raw("m1", "2024-01-01T10:00:00Z", conversation_id="c1", cc=("x@client.org",))],
    )
    before = set(store.threads[0].participants)

    _ingest(
        store,
        "q_1",
        [
            _raw(
                "m2",
                "2024-01-01T11:00:00Z",
                sender="agent@futuregate.info",
                to=("client@client.org",),
                conversation_id="c1",
            )
        ],
    )
    after = store.threads[0].participants

    assert before <= set(after)
    assert "x@client.org" in after
    assert list(after) == sorted(after)


def test_first_real_subject_wins(store: InMemoryThreadStore) -> None:
    _ingest(store, "q_1", [_raw("m1", "2024-01-01T10:00:00Z", subject="", conversation_id="c1")])
    assert store.threads[0].subject == NO_SUBJECT

    _ingest(store, "q_1", [_raw("m2", "2024-01-01T11:00:00Z", subject="Re:", conversation_id="c1")])
    assert store.threads[0].subject == NO_SUBJECT

    _ingest(
        store,
        "q_1",
        [_raw("m3", "2024-01-01T12:00:00Z", subject="Fwd: Contract", conversation_id="c1")],
    )
    assert store.threads[0].subject == "Contract"

    _ingest(
        store,
        "q_1",
        [_raw("m4", "2024-01-01T13:00:00Z", subject="Something else", conversation_id="c1")],
    )
    assert store.threads[0].subject == "Contract"


def test_threads_are_not_shared_across_queries(store: InMemoryThreadStore) -> None:
    first = _ingest(store, "q_1", [_raw("m1", "2024-01-01T10:00:00Z", conversation_id="c1")])
    second = _ingest(store, "q_2", [_raw("m2", "2024-01-01T11:00:00Z", conversation_id="c1")])

    assert len(store.threads) == 2
    assert first.touched_thread_ids != second.touched_thread_ids
    assert {t.query_id for t in store.threads} == {"q_1", "q_2"}


def test_duplicate_from_other_query_touches_original_thread(
    store: InMemoryThreadStore,
) -> None:
    first = _ingest(store, "q_1", [_raw("m1", "2024-01-01T10:00:00Z")])
    second = _ingest(store, "q_2", [_raw("m1", "2024-01-01T10:00:00Z")])

    assert second.created_email_ids == ()
    assert second.touched_thread_ids == first.touched_thread_ids
    assert len(store.threads) == 1


def test_fallback_key_groups_messages_without_conversation_id(
    store: InMemoryThreadStore,
) -> None:
    _ingest(
        store,
        "q_1",
        [
            _raw("m1", "2024-01-01T10:00:00Z", subject="hello"),
            _raw("m2", "2024-01-01T10:30:00Z", subject="Re: hello"),
            _raw("m3", "2024-01-01T10:45:00Z", subject="hello", cc=("new@client.org",)),
        ],
    )

    assert len(store.threads) == 2
    assert store.threads[0].key.startswith("fallback:")
    assert len(store.emails_for_thread(store.threads[0].id)) == 2


def test_snippet_is_truncated_to_limit(store: InMemoryThreadStore) -> None:
    ingest_batch(
        store,
        "q_1",
        [_raw("m1", "2024-01-01T10:00:00Z", snippet="x" * 50)],
        staff_domain=STAFF_DOMAIN,
        snippet_limit=10,
    )

    assert store.emails[0].snippet == "x" * 10
