"""Abstract interfaces for the remote lock and its reentrant facade."""

from __future__ import annotations

import abc
from typing import Any, AsyncContextManager, ContextManager, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class ClientPool(Protocol):
    """Source of short-lived client handles.

    ``acquire`` hands out a client bound to one pooled connection;
    ``release`` must be called exactly once per acquired handle.
    """

    def acquire(self) -> Any: ...
    def release(self, client: Any) -> None: ...


@runtime_checkable
class AsyncClientPool(Protocol):
    async def acquire(self) -> Any: ...
    async def release(self, client: Any) -> None: ...


class RemoteLock(Protocol):
    def try_acquire(self, key: str, owner_token: str, ttl_seconds: int) -> bool: ...
    def release(self, key: str, owner_token: str) -> bool: ...


class AsyncRemoteLock(Protocol):
    async def try_acquire(self, key: str, owner_token: str, ttl_seconds: int) -> bool: ...
    async def release(self, key: str, owner_token: str) -> bool: ...


class ReentrantLock(abc.ABC):
    """Lock that the same execution context may take repeatedly without blocking."""

    @abc.abstractmethod
    def lock(self, key: str, owner_token: str, ttl_seconds: Optional[int] = None) -> bool:  # pragma: no cover - interface
        """Try to take ``key``; never waits."""
        raise NotImplementedError

    @abc.abstractmethod
    def unlock(self, key: str, owner_token: str) -> bool:  # pragma: no cover - interface
        """Drop one level of ``key``; the remote entry goes on the outermost call."""
        raise NotImplementedError

    @abc.abstractmethod
    def hold(self, key: str, owner_token: Optional[str] = None, ttl_seconds: Optional[int] = None) -> ContextManager[bool]:  # pragma: no cover - interface
        """Return a context manager yielding whether the lock was taken."""
        raise NotImplementedError

    @abc.abstractmethod
    def depth(self, key: str) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    def held_keys(self) -> Tuple[str, ...]:  # pragma: no cover - interface
        raise NotImplementedError


class AsyncReentrantLock(abc.ABC):
    """asyncio counterpart of :class:`ReentrantLock`; depth is tracked per task."""

    @abc.abstractmethod
    async def lock(self, key: str, owner_token: str, ttl_seconds: Optional[int] = None) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    async def unlock(self, key: str, owner_token: str) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    def hold(self, key: str, owner_token: Optional[str] = None, ttl_seconds: Optional[int] = None) -> AsyncContextManager[bool]:  # pragma: no cover - interface
        """Return an async context manager yielding whether the lock was taken."""
        raise NotImplementedError

    @abc.abstractmethod
    def depth(self, key: str) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    def held_keys(self) -> Tuple[str, ...]:  # pragma: no cover - interface
        raise NotImplementedError
