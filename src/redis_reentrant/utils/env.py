"""Environment helper utilities."""

from __future__ import annotations

import os
from typing import Optional


def get_str_env(name: str, *, default: Optional[str] = None) -> Optional[str]:
    """Return a stripped string, treating blank values as unset."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value or default


def get_int_env(name: str, *, default: Optional[int] = None) -> Optional[int]:
    raw = get_str_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def get_float_env(name: str, *, default: Optional[float] = None) -> Optional[float]:
    raw = get_str_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from exc
