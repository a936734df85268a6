"""Owner token generation."""

from __future__ import annotations

import uuid


def new_owner_token(prefix: str = "") -> str:
    """Return a fresh, ASCII-safe owner token.

    Tokens must be unique per acquisition; a random uuid4 is sufficient.
    """
    token = uuid.uuid4().hex
    return f"{prefix}{token}" if prefix else token
