"""Client-to-staff response latency for a thread."""

from __future__ import annotations

import math
from collections.abc import Sequence

from inbox_threads.core.models import Direction, Email, ResponseMetric, ThreadMetrics


def compute_response_metrics(emails: Sequence[Email]) -> ThreadMetrics:
    """Measure how long each client message waited for a staff reply.

    ``emails`` may arrive in any order. Each client message is paired with
    the first staff message sent after it; one staff message can answer
    several earlier client messages.
    """
    ordered = sorted(emails, key=lambda email: email.sent_at)

    per_client: list[ResponseMetric] = []
    for index, message in enumerate(ordered):
        if message.direction is not Direction.CLIENT:
            continue
        reply = next(
            (
                candidate
                for candidate in ordered[index + 1 :]
                if candidate.direction is Direction.STAFF
            ),
            None,
        )
        if reply is None:
            per_client.append(
                ResponseMetric(
                    client_message_id=message.id,
                    staff_reply_id=None,
                    response_seconds=None,
                )
            )
            continue
        elapsed = (reply.sent_at - message.sent_at).total_seconds()
        per_client.append(
            ResponseMetric(
                client_message_id=message.id,
                staff_reply_id=reply.id,
                response_seconds=max(0, math.floor(elapsed)),
            )
        )

    answered = [
        metric.response_seconds
        for metric in per_client
        if metric.response_seconds is not None
    ]
    average = _round_half_up(sum(answered) / len(answered)) if answered else None
    return ThreadMetrics(per_client=tuple(per_client), average_seconds=average)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


__all__ = ["compute_response_metrics"]
