"""Reentrant distributed lock backed by Redis."""

from .core import (
    AsyncReentrantRedisLock,
    AsyncRedisLockPrimitive,
    LockSettings,
    RedisLockPrimitive,
    ReentrantRedisLock,
    create_async_lock,
    create_lock,
)
from .utils.tokens import new_owner_token

__all__ = [
    "__version__",
    "AsyncReentrantRedisLock",
    "AsyncRedisLockPrimitive",
    "LockSettings",
    "RedisLockPrimitive",
    "ReentrantRedisLock",
    "create_async_lock",
    "create_lock",
    "new_owner_token",
]

__version__ = "0.1.0"
