from __future__ import annotations

import logging

import pytest
import redis
import redis.asyncio as aioredis

from redis_reentrant import AsyncReentrantRedisLock, LockSettings, ReentrantRedisLock, create_async_lock, create_lock
from redis_reentrant.core.settings import create_async_pool, create_pool


def test_defaults():
    settings = LockSettings()

    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.default_ttl_seconds == 30
    assert settings.key_prefix == ""
    assert settings.max_connections is None


def test_from_file(tmp_path):
    path = tmp_path / "lock.yml"
    path.write_text(
        "redis_url: redis://cache:6380/2\n"
        "max_connections: 8\n"
        "default_ttl_seconds: 10\n"
        "key_prefix: 'lock:'\n"
        "log_level: debug\n"
    )

    settings = LockSettings.from_file(path)

    assert settings.redis_url == "redis://cache:6380/2"
    assert settings.max_connections == 8
    assert settings.default_ttl_seconds == 10
    assert settings.key_prefix == "lock:"
    assert settings.log_level == "DEBUG"


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "lock.yml"
    path.write_text("")

    assert LockSettings.from_file(path) == LockSettings()


@pytest.mark.parametrize(
    "body",
    [
        "default_ttl_seconds: 0\n",
        "redis_url: http://example.com\n",
        "max_connections: 0\n",
        "log_level: chatty\n",
    ],
)
def test_invalid_file_raises_value_error(tmp_path, body):
    path = tmp_path / "lock.yml"
    path.write_text(body)

    with pytest.raises(ValueError):
        LockSettings.from_file(path)


def test_from_env(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://env-host:6379/1")
    monkeypatch.setenv("REDIS_REENTRANT_MAX_CONNECTIONS", "4")
    monkeypatch.setenv("REDIS_REENTRANT_DEFAULT_TTL", "12")
    monkeypatch.setenv("REDIS_REENTRANT_KEY_PREFIX", "jobs:")
    monkeypatch.setenv("REDIS_REENTRANT_SOCKET_TIMEOUT", "2.5")
    monkeypatch.setenv("REDIS_REENTRANT_LOG_LEVEL", " ")

    settings = LockSettings.from_env()

    assert settings.redis_url == "redis://env-host:6379/1"
    assert settings.max_connections == 4
    assert settings.default_ttl_seconds == 12
    assert settings.key_prefix == "jobs:"
    assert settings.socket_timeout == 2.5
    assert settings.log_level == "INFO"


def test_from_env_rejects_non_numeric(monkeypatch):
    monkeypatch.setenv("REDIS_REENTRANT_DEFAULT_TTL", "soon")

    with pytest.raises(ValueError):
        LockSettings.from_env()


def test_pools_are_built_from_url():
    settings = LockSettings(redis_url="redis://cache:6380/3", max_connections=5, socket_timeout=1.5)

    pool = create_pool(settings)
    async_pool = create_async_pool(settings)

    assert isinstance(pool, redis.ConnectionPool)
    assert isinstance(async_pool, aioredis.ConnectionPool)
    for built in (pool, async_pool):
        assert built.max_connections == 5
        assert built.connection_kwargs["host"] == "cache"
        assert built.connection_kwargs["port"] == 6380
        assert built.connection_kwargs["db"] == 3
        assert built.connection_kwargs["socket_timeout"] == 1.5


def test_create_lock_applies_settings():
    settings = LockSettings(key_prefix="lock:", default_ttl_seconds=7, log_level="WARNING")

    lock = create_lock(settings)
    async_lock = create_async_lock(settings)

    assert isinstance(lock, ReentrantRedisLock)
    assert isinstance(async_lock, AsyncReentrantRedisLock)
    assert lock.primitive.key_prefix == "lock:"
    assert async_lock.primitive.key_prefix == "lock:"
    assert logging.getLogger("redis_reentrant.lock").level == logging.WARNING
