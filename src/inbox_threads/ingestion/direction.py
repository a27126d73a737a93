"""Classify message senders as staff or client."""

from __future__ import annotations

from ..core.models import Direction
from .normalize import domain_of


def classify_direction(sender: str | None, staff_domain: str) -> Direction:
    """Return ``STAFF`` when the sender's domain equals ``staff_domain``.

    Comparison is case-insensitive and exact; ``mail.example.com`` does not
    match a staff domain of ``example.com``.
    """
    domain = domain_of(sender)
    if domain and domain == staff_domain.strip().lower():
        return Direction.STAFF
    return Direction.CLIENT


__all__ = ["classify_direction"]
