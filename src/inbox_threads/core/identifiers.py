"""Random identifiers for stored records."""

from __future__ import annotations

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits + "_-"
_ID_LENGTH = 10


def new_id(prefix: str) -> str:
    """Return ``<prefix>_`` followed by ten URL-safe random characters."""
    token = "".join(secrets.choice(_ALPHABET) for _ in range(_ID_LENGTH))
    return f"{prefix}_{token}"


__all__ = ["new_id"]
