"""Core lock primitives: the remote lock and its reentrant facade."""

from .locks import AsyncClientPool, AsyncReentrantLock, AsyncRemoteLock, ClientPool, ReentrantLock, RemoteLock
from .locks_redis import RELEASE_SCRIPT, AsyncRedisLockPrimitive, RedisLockPrimitive
from .pools import AsyncRedisClientPool, RedisClientPool
from .reentrant import DEFAULT_TTL_SECONDS, AsyncReentrantRedisLock, ReentrantRedisLock
from .settings import LockSettings, create_async_lock, create_async_pool, create_lock, create_pool

__all__ = [
    "AsyncClientPool",
    "AsyncRedisClientPool",
    "AsyncRedisLockPrimitive",
    "AsyncReentrantLock",
    "AsyncReentrantRedisLock",
    "AsyncRemoteLock",
    "ClientPool",
    "DEFAULT_TTL_SECONDS",
    "LockSettings",
    "RELEASE_SCRIPT",
    "RedisClientPool",
    "RedisLockPrimitive",
    "ReentrantLock",
    "ReentrantRedisLock",
    "RemoteLock",
    "create_async_lock",
    "create_async_pool",
    "create_lock",
    "create_pool",
]
