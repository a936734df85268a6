"""Adapters turning redis-py connection pools into client-handle sources."""

from __future__ import annotations

from typing import Union

import redis
import redis.asyncio as aioredis

from .locks import AsyncClientPool, ClientPool


class RedisClientPool:
    """Hands out single-connection ``redis.Redis`` clients from a shared pool."""

    def __init__(self, pool: redis.ConnectionPool) -> None:
        self._pool = pool

    @property
    def connection_pool(self) -> redis.ConnectionPool:
        return self._pool

    def acquire(self) -> redis.Redis:
        # single_connection_client checks one connection out of the pool up front
        return redis.Redis(connection_pool=self._pool, single_connection_client=True)

    def release(self, client: redis.Redis) -> None:
        # close() hands the connection back; the shared pool itself stays open
        client.close()


class AsyncRedisClientPool:
    """asyncio counterpart of :class:`RedisClientPool`."""

    def __init__(self, pool: aioredis.ConnectionPool) -> None:
        self._pool = pool

    @property
    def connection_pool(self) -> aioredis.ConnectionPool:
        return self._pool

    async def acquire(self) -> aioredis.Redis:
        client = aioredis.Redis(connection_pool=self._pool, single_connection_client=True)
        try:
            await client.initialize()
        except BaseException:
            await client.aclose()
            raise
        return client

    async def release(self, client: aioredis.Redis) -> None:
        await client.aclose()


def as_client_pool(pool: Union[redis.ConnectionPool, ClientPool]) -> ClientPool:
    if isinstance(pool, redis.ConnectionPool):
        return RedisClientPool(pool)
    if isinstance(pool, ClientPool):
        return pool
    raise TypeError(f"Expected a redis ConnectionPool or ClientPool, got {type(pool).__name__}")


def as_async_client_pool(pool: Union[aioredis.ConnectionPool, AsyncClientPool]) -> AsyncClientPool:
    if isinstance(pool, aioredis.ConnectionPool):
        return AsyncRedisClientPool(pool)
    if isinstance(pool, AsyncClientPool):
        return pool
    raise TypeError(f"Expected a redis.asyncio ConnectionPool or AsyncClientPool, got {type(pool).__name__}")
