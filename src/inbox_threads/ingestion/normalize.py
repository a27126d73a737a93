"""Pure helpers turning raw provider strings into canonical forms."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable

_REPLY_PREFIX = re.compile(r"^\s*(?:re|fw|fwd)\s*:\s*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_address(raw: str | None) -> str:
    """Return ``raw`` trimmed and lowercased; empty for missing input."""
    if not raw:
        return ""
    return str(raw).strip().lower()


def domain_of(address: str | None) -> str:
    """Return the part of ``address`` after its last ``@``."""
    normalized = normalize_address(address)
    _, at, domain = normalized.rpartition("@")
    return domain if at else ""


def normalize_subject(raw: str | None) -> str:
    """Strip stacked ``Re:``/``Fw:``/``Fwd:`` markers and collapse whitespace."""
    if not raw:
        return ""
    subject = str(raw).strip()
    while True:
        stripped = _REPLY_PREFIX.sub("", subject, count=1)
        if stripped == subject:
            break
        subject = stripped
    return _WHITESPACE.sub(" ", subject).strip()


def stable_hash(value: str) -> str:
    """Return a SHA-256 hex digest of ``value``."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def collect_participants(
    sender: str | None, to: Iterable[str], cc: Iterable[str]
) -> tuple[str, ...]:
    """Return the sorted, de-duplicated set of addresses on a message."""
    addresses = {normalize_address(sender)}
    addresses.update(normalize_address(address) for address in to)
    addresses.update(normalize_address(address) for address in cc)
    addresses.discard("")
    return tuple(sorted(addresses))


__all__ = [
    "collect_participants",
    "domain_of",
    "normalize_address",
    "normalize_subject",
    "stable_hash",
]
