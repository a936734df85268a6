"""Reentrant facade over the remote lock primitive.

The facade keeps a per-context ``key -> depth`` table and only talks to
Redis on the outermost ``lock`` and the outermost ``unlock``. Inner calls
adjust the depth locally and never block.

This is not a perfect distributed lock: there is no lease renewal, so a
holder that outlives its TTL may find another context holding the key
by the time it releases. The outermost ``unlock`` then returns False.
"""

from __future__ import annotations

import contextlib
from typing import AsyncIterator, Iterator, Optional, Tuple, Union

import redis
import redis.asyncio as aioredis

from redis_reentrant.utils.logging import get_logger
from redis_reentrant.utils.tokens import new_owner_token

from .locks import (
    AsyncClientPool,
    AsyncReentrantLock,
    AsyncRemoteLock,
    ClientPool,
    ReentrantLock,
    RemoteLock,
)
from .locks_redis import AsyncRedisLockPrimitive, RedisLockPrimitive, validate_token, validate_ttl
from .reentrancy import ContextLocalTables


DEFAULT_TTL_SECONDS = 30


logger = get_logger("redis_reentrant.lock")


class ReentrantRedisLock(ReentrantLock):
    """Thread-reentrant distributed lock.

    ``lock`` on a key the current context already holds bumps the depth and
    ignores the new token and TTL; the first acquisition's values stay in
    force. ``unlock`` must be given the token used for the outermost ``lock``.
    """

    def __init__(
        self,
        pool: Union[redis.ConnectionPool, ClientPool, None] = None,
        *,
        key_prefix: str = "",
        primitive: Optional[RemoteLock] = None,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        validate_ttl(default_ttl_seconds)
        if primitive is None:
            if pool is None:
                raise ValueError("Either a connection pool or a lock primitive is required")
            primitive = RedisLockPrimitive(pool, key_prefix=key_prefix)
        self._primitive = primitive
        self._default_ttl = default_ttl_seconds
        self._tables = ContextLocalTables("redis_reentrant_sync")

    def _ttl(self, ttl_seconds: Optional[int]) -> int:
        return self._default_ttl if ttl_seconds is None else ttl_seconds

    @property
    def primitive(self) -> RemoteLock:
        return self._primitive

    def lock(self, key: str, owner_token: str, ttl_seconds: Optional[int] = None) -> bool:
        table = self._tables.current()
        depth = table.get(key)
        if depth is not None:
            table.set(key, depth + 1)
            logger.debug("reenter %s depth=%d", key, depth + 1)
            return True
        if not self._primitive.try_acquire(key, owner_token, self._ttl(ttl_seconds)):
            return False
        table.set(key, 1)
        return True

    def unlock(self, key: str, owner_token: str) -> bool:
        table = self._tables.current()
        depth = table.get(key)
        if depth is None:
            logger.debug("unlock of %s without a matching lock in this context", key)
            return False
        depth -= 1
        if depth > 0:
            table.set(key, depth)
            logger.debug("leave %s depth=%d", key, depth)
            return True
        validate_token(owner_token)
        # committed locally before the round-trip; a failed release is left to the TTL
        table.remove(key)
        released = self._primitive.release(key, owner_token)
        if not released:
            logger.warning("Lock %s had already expired or changed owner before release", key)
        return released

    @contextlib.contextmanager
    def hold(
        self, key: str, owner_token: Optional[str] = None, ttl_seconds: Optional[int] = None
    ) -> Iterator[bool]:
        """Try to lock ``key`` for the duration of the block.

        Yields whether the lock was taken; the block runs either way and
        is responsible for checking the flag.
        """
        token = owner_token or new_owner_token()
        acquired = self.lock(key, token, ttl_seconds)
        try:
            yield acquired
        finally:
            if acquired:
                self.unlock(key, token)

    def depth(self, key: str) -> int:
        table = self._tables.peek()
        if table is None:
            return 0
        return table.get(key) or 0

    def held_keys(self) -> Tuple[str, ...]:
        table = self._tables.peek()
        return table.keys() if table is not None else ()


class AsyncReentrantRedisLock(AsyncReentrantLock):
    """Task-reentrant distributed lock for ``redis.asyncio``.

    Same contract as :class:`ReentrantRedisLock`, with depth tracked per
    asyncio task.
    """

    def __init__(
        self,
        pool: Union[aioredis.ConnectionPool, AsyncClientPool, None] = None,
        *,
        key_prefix: str = "",
        primitive: Optional[AsyncRemoteLock] = None,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        validate_ttl(default_ttl_seconds)
        if primitive is None:
            if pool is None:
                raise ValueError("Either a connection pool or a lock primitive is required")
            primitive = AsyncRedisLockPrimitive(pool, key_prefix=key_prefix)
        self._primitive = primitive
        self._default_ttl = default_ttl_seconds
        self._tables = ContextLocalTables("redis_reentrant_async")

    def _ttl(self, ttl_seconds: Optional[int]) -> int:
        return self._default_ttl if ttl_seconds is None else ttl_seconds

    @property
    def primitive(self) -> AsyncRemoteLock:
        return self._primitive

    async def lock(self, key: str, owner_token: str, ttl_seconds: Optional[int] = None) -> bool:
        table = self._tables.current()
        depth = table.get(key)
        if depth is not None:
            table.set(key, depth + 1)
            logger.debug("reenter %s depth=%d", key, depth + 1)
            return True
        if not await self._primitive.try_acquire(key, owner_token, self._ttl(ttl_seconds)):
            return False
        table.set(key, 1)
        return True

    async def unlock(self, key: str, owner_token: str) -> bool:
        table = self._tables.current()
        depth = table.get(key)
        if depth is None:
            logger.debug("unlock of %s without a matching lock in this context", key)
            return False
        depth -= 1
        if depth > 0:
            table.set(key, depth)
            logger.debug("leave %s depth=%d", key, depth)
            return True
        validate_token(owner_token)
        table.remove(key)
        released = await self._primitive.release(key, owner_token)
        if not released:
            logger.warning("Lock %s had already expired or changed owner before release", key)
        return released

    @contextlib.asynccontextmanager
    async def hold(
        self, key: str, owner_token: Optional[str] = None, ttl_seconds: Optional[int] = None
    ) -> AsyncIterator[bool]:
        token = owner_token or new_owner_token()
        acquired = await self.lock(key, token, ttl_seconds)
        try:
            yield acquired
        finally:
            if acquired:
                await self.unlock(key, token)

    def depth(self, key: str) -> int:
        table = self._tables.peek()
        if table is None:
            return 0
        return table.get(key) or 0

    def held_keys(self) -> Tuple[str, ...]:
        table = self._tables.peek()
        return table.keys() if table is not None else ()
