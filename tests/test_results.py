"""Tests for query registration and applying results batches."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from inbox_threads.core.config import AppSettings
from inbox_threads.core.models import QueryStatus
from inbox_threads.ingestion import (
    mark_query_failed,
    parse_results_payload,
    record_results,
    register_query,
)
from inbox_threads.storage import InMemoryThreadStore

SETTINGS = AppSettings()


def _message(message_id: str, sent_at: str = "2024-01-01T10:00:00Z") -> dict[str, str]:
    return {
        "messageId": message_id,
        "subject": "Shipment",
        "from": "client@client.org",
        "to": "agent@futuregate.info",
        "sentAt": sent_at,
    }


def test_register_query_creates_pending_query() -> None:
    store = InMemoryThreadStore()
    now = datetime(2024, 1, 1, tzinfo=UTC)

    query = register_query(store, "  invoice ", date_from="2024-01-01", now=now)

    assert query.id.startswith("q_")
    assert query.keyword == "invoice"
    assert query.date_from == "2024-01-01"
    assert query.date_to is None
    assert query.max_results == 50
    assert query.status is QueryStatus.PENDING
    assert query.created_at == query.updated_at == now
    assert store.get_query(query.id) is query


@pytest.mark.parametrize("keyword", ["", " ", "x", " y "])
def test_register_query_rejects_short_keywords(keyword: str) -> None:
    store = InMemoryThreadStore()
    with pytest.raises(ValueError):
        register_query(store, keyword)
    assert store.queries == ()


def test_unknown_query_refuses_whole_batch() -> None:
    store = InMemoryThreadStore()
    batch = parse_results_payload({"queryId": "q_missing", "emails": [_message("m1")]})

    outcome = record_results(store, batch, settings=SETTINGS)

    assert not outcome.ok
    assert outcome.error == "Unknown queryId"
    assert store.emails == ()
    assert store.threads == ()


def test_results_update_query_counters_and_status() -> None:
    store = InMemoryThreadStore()
    query = register_query(store, "shipment")
    batch = parse_results_payload(
        {
            "queryId": query.id,
            "emails": [_message("m1"), _message("m2", "garbage"), _message("m1")],
        }
    )

    first = record_results(store, batch, settings=SETTINGS)
    second = record_results(store, batch, settings=SETTINGS)

    assert first.ok and second.ok
    assert len(first.created_email_ids) == 1
    assert second.created_email_ids == ()
    assert second.touched_thread_ids == first.touched_thread_ids
    assert query.status is QueryStatus.COMPLETE
    assert query.received_count == 6
    assert query.created_messages == 1


def test_mark_query_failed_records_error() -> None:
    store = InMemoryThreadStore()
    query = register_query(store, "shipment")

    updated = mark_query_failed(store, query.id, "search hook error: 500")

    assert updated is query
    assert query.status is QueryStatus.FAILED
    assert query.error == "search hook error: 500"
    assert mark_query_failed(store, "q_missing", "boom") is None


def test_parse_results_payload_unwraps_json_forms() -> None:
    body = {"queryId": "q_1", "emails": [_message("m1")]}

    from_string = parse_results_payload(json.dumps(body))
    from_wrapper = parse_results_payload({"payload": json.dumps(body)})

    assert from_string.query_id == from_wrapper.query_id == "q_1"
    assert len(from_wrapper.emails) == 1


@pytest.mark.parametrize(
    "body",
    [
        {"emails": []},
        {"queryId": "q_1"},
        {"queryId": "q_1", "emails": "nope"},
        None,
        [],
    ],
)
def test_parse_results_payload_rejects_invalid_batches(body: object) -> None:
    with pytest.raises(ValidationError):
        parse_results_payload(body)


def test_parse_results_payload_rejects_bad_json() -> None:
    with pytest.raises(ValueError):
        parse_results_payload("{not json")
