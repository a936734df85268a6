"""Settings loader and connection pool factories."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import redis
import redis.asyncio as aioredis
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from redis_reentrant.utils.env import get_float_env, get_int_env, get_str_env
from redis_reentrant.utils.logging import resolve_level, set_level

from .reentrant import AsyncReentrantRedisLock, ReentrantRedisLock


DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class LockSettings(BaseModel):
    """Connection and default values used to build locks."""

    redis_url: str = DEFAULT_REDIS_URL
    max_connections: Optional[int] = Field(default=None, ge=1)
    socket_timeout: Optional[float] = Field(default=None, gt=0)
    default_ttl_seconds: int = Field(default=30, ge=1)
    key_prefix: str = ""
    log_level: str = "INFO"

    @field_validator("redis_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must use the redis://, rediss:// or unix:// scheme")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        resolve_level(value)
        return value.upper()

    @classmethod
    def from_file(cls, path: Path) -> "LockSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    @classmethod
    def from_env(cls) -> "LockSettings":
        data = {
            "redis_url": get_str_env("REDIS_URL"),
            "max_connections": get_int_env("REDIS_REENTRANT_MAX_CONNECTIONS"),
            "socket_timeout": get_float_env("REDIS_REENTRANT_SOCKET_TIMEOUT"),
            "default_ttl_seconds": get_int_env("REDIS_REENTRANT_DEFAULT_TTL"),
            "key_prefix": get_str_env("REDIS_REENTRANT_KEY_PREFIX"),
            "log_level": get_str_env("REDIS_REENTRANT_LOG_LEVEL"),
        }
        data = {name: value for name, value in data.items() if value is not None}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings in environment: {exc}") from exc


def _pool_kwargs(settings: LockSettings) -> dict:
    kwargs: dict = {}
    if settings.max_connections is not None:
        kwargs["max_connections"] = settings.max_connections
    if settings.socket_timeout is not None:
        kwargs["socket_timeout"] = settings.socket_timeout
    return kwargs


def create_pool(settings: LockSettings) -> redis.ConnectionPool:
    return redis.ConnectionPool.from_url(settings.redis_url, **_pool_kwargs(settings))


def create_async_pool(settings: LockSettings) -> aioredis.ConnectionPool:
    return aioredis.ConnectionPool.from_url(settings.redis_url, **_pool_kwargs(settings))


LOGGER_NAMES = ("redis_reentrant.primitive", "redis_reentrant.lock")


def configure_logging(settings: LockSettings) -> None:
    set_level(settings.log_level, *LOGGER_NAMES)


def create_lock(settings: LockSettings) -> ReentrantRedisLock:
    configure_logging(settings)
    return ReentrantRedisLock(
        create_pool(settings),
        key_prefix=settings.key_prefix,
        default_ttl_seconds=settings.default_ttl_seconds,
    )


def create_async_lock(settings: LockSettings) -> AsyncReentrantRedisLock:
    configure_logging(settings)
    return AsyncReentrantRedisLock(
        create_async_pool(settings),
        key_prefix=settings.key_prefix,
        default_ttl_seconds=settings.default_ttl_seconds,
    )
