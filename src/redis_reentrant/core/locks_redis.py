"""Redis-based owner-scoped lock using SET NX EX semantics.

Acquire is a conditional set with expiry; release is an atomic
compare-and-delete script so a late release never removes a lock that
expired and was taken by another owner. Every operation borrows exactly
one client handle and returns it on all exit paths.
"""

from __future__ import annotations

import contextlib
import hashlib
from typing import Any, AsyncIterator, Iterator, Union

import redis
import redis.asyncio as aioredis
from redis.exceptions import NoScriptError

from redis_reentrant.utils.logging import get_logger

from .locks import AsyncClientPool, ClientPool
from .pools import as_async_client_pool, as_client_pool


# release only if token matches
RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

RELEASE_SCRIPT_SHA = hashlib.sha1(RELEASE_SCRIPT.encode("utf-8")).hexdigest()

RELEASE_SUCCESS = 1


logger = get_logger("redis_reentrant.primitive")


def validate_key(key: str) -> None:
    if not isinstance(key, str) or not key:
        raise ValueError("Lock key must be a non-empty string")


def validate_token(owner_token: str) -> None:
    if not isinstance(owner_token, str) or not owner_token:
        raise ValueError("Owner token must be a non-empty string")
    if not owner_token.isascii():
        raise ValueError("Owner token must be ASCII")


def validate_ttl(ttl_seconds: int) -> None:
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds < 1:
        raise ValueError(f"ttl_seconds must be an integer >= 1, got {ttl_seconds!r}")


def _released(result: Any) -> bool:
    try:
        return int(result) == RELEASE_SUCCESS
    except (TypeError, ValueError):
        return False


class RedisLockPrimitive:
    """Non-blocking, owner-scoped remote lock.

    Not reentrant: a second ``try_acquire`` on a held key fails even for
    the same owner. See :class:`redis_reentrant.core.reentrant.ReentrantRedisLock`.
    """

    def __init__(self, pool: Union[redis.ConnectionPool, ClientPool], *, key_prefix: str = "") -> None:
        self._pool = as_client_pool(pool)
        self._key_prefix = key_prefix

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def remote_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    @contextlib.contextmanager
    def _client(self) -> Iterator[Any]:
        client = self._pool.acquire()
        try:
            yield client
        finally:
            self._pool.release(client)

    def try_acquire(self, key: str, owner_token: str, ttl_seconds: int) -> bool:
        """Create ``key -> owner_token`` with a TTL iff the key is absent."""
        validate_key(key)
        validate_token(owner_token)
        validate_ttl(ttl_seconds)
        remote_key = self.remote_key(key)
        with self._client() as client:
            reply = client.set(remote_key, owner_token, nx=True, ex=ttl_seconds)
        acquired = bool(reply)
        logger.debug("acquire %s ttl=%ss -> %s", remote_key, ttl_seconds, "won" if acquired else "busy")
        return acquired

    def release(self, key: str, owner_token: str) -> bool:
        """Delete ``key`` iff it still holds ``owner_token``."""
        validate_key(key)
        validate_token(owner_token)
        remote_key = self.remote_key(key)
        with self._client() as client:
            try:
                result = client.evalsha(RELEASE_SCRIPT_SHA, 1, remote_key, owner_token)
            except NoScriptError:
                # script cache flushed or never loaded; EVAL also caches it server-side
                result = client.eval(RELEASE_SCRIPT, 1, remote_key, owner_token)
        released = _released(result)
        logger.debug("release %s -> %s", remote_key, "deleted" if released else "not owner")
        return released


class AsyncRedisLockPrimitive:
    """asyncio counterpart of :class:`RedisLockPrimitive`."""

    def __init__(
        self, pool: Union[aioredis.ConnectionPool, AsyncClientPool], *, key_prefix: str = ""
    ) -> None:
        self._pool = as_async_client_pool(pool)
        self._key_prefix = key_prefix

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    def remote_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    @contextlib.asynccontextmanager
    async def _client(self) -> AsyncIterator[Any]:
        client = await self._pool.acquire()
        try:
            yield client
        finally:
            await self._pool.release(client)

    async def try_acquire(self, key: str, owner_token: str, ttl_seconds: int) -> bool:
        validate_key(key)
        validate_token(owner_token)
        validate_ttl(ttl_seconds)
        remote_key = self.remote_key(key)
        async with self._client() as client:
            reply = await client.set(remote_key, owner_token, nx=True, ex=ttl_seconds)
        acquired = bool(reply)
        logger.debug("acquire %s ttl=%ss -> %s", remote_key, ttl_seconds, "won" if acquired else "busy")
        return acquired

    async def release(self, key: str, owner_token: str) -> bool:
        validate_key(key)
        validate_token(owner_token)
        remote_key = self.remote_key(key)
        async with self._client() as client:
            try:
                result = await client.evalsha(RELEASE_SCRIPT_SHA, 1, remote_key, owner_token)
            except NoScriptError:
                result = await client.eval(RELEASE_SCRIPT, 1, remote_key, owner_token)
        released = _released(result)
        logger.debug("release %s -> %s", remote_key, "deleted" if released else "not owner")
        return released
