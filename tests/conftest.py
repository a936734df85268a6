from __future__ import annotations

import hashlib
import threading
from typing import Dict, List, Optional, Tuple

import pytest
from redis.exceptions import NoScriptError

from redis_reentrant.core.locks_redis import RELEASE_SCRIPT


class FakeStore:
    """In-memory stand-in for the few Redis commands the lock uses."""

    def __init__(self, *, script_cached: bool = True) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, float]] = {}
        self._scripts: Dict[str, str] = {}
        self.now = 0.0
        self.commands: List[str] = []
        self.fail_with: Optional[Exception] = None
        if script_cached:
            self.script_load(RELEASE_SCRIPT)

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds

    def _expire(self, key: str) -> None:
        entry = self._data.get(key)
        if entry is not None and entry[1] <= self.now:
            del self._data[key]

    def _record(self, command: str) -> None:
        self.commands.append(command)
        if self.fail_with is not None:
            raise self.fail_with

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            self._expire(key)
            entry = self._data.get(key)
            return entry[0] if entry else None

    def script_load(self, script: str) -> str:
        sha = hashlib.sha1(script.encode("utf-8")).hexdigest()
        self._scripts[sha] = script
        return sha

    def set(self, key: str, value: str, *, nx: bool = False, ex: Optional[int] = None) -> Optional[bool]:
        with self._lock:
            self._record("SET")
            self._expire(key)
            if nx and key in self._data:
                return None
            expires_at = self.now + ex if ex is not None else float("inf")
            self._data[key] = (value, expires_at)
            return True

    def _run_release(self, script: str, key: str, token: str) -> int:
        assert script == RELEASE_SCRIPT
        self._expire(key)
        entry = self._data.get(key)
        if entry is not None and entry[0] == token:
            del self._data[key]
            return 1
        return 0

    def evalsha(self, sha: str, numkeys: int, *args: str) -> int:
        with self._lock:
            self._record("EVALSHA")
            script = self._scripts.get(sha)
            if script is None:
                raise NoScriptError("No matching script. Please use EVAL.")
            return self._run_release(script, *args)

    def eval(self, script: str, numkeys: int, *args: str) -> int:
        with self._lock:
            self._record("EVAL")
            self.script_load(script)
            return self._run_release(script, *args)

    @property
    def round_trips(self) -> int:
        return len(self.commands)


class FakeClient:
    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.closed = False

    def set(self, key, value, *, nx=False, ex=None):
        assert not self.closed
        return self._store.set(key, value, nx=nx, ex=ex)

    def evalsha(self, sha, numkeys, *args):
        assert not self.closed
        return self._store.evalsha(sha, numkeys, *args)

    def eval(self, script, numkeys, *args):
        assert not self.closed
        return self._store.eval(script, numkeys, *args)


class FakeAsyncClient:
    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.closed = False

    async def set(self, key, value, *, nx=False, ex=None):
        assert not self.closed
        return self._store.set(key, value, nx=nx, ex=ex)

    async def evalsha(self, sha, numkeys, *args):
        assert not self.closed
        return self._store.evalsha(sha, numkeys, *args)

    async def eval(self, script, numkeys, *args):
        assert not self.closed
        return self._store.eval(script, numkeys, *args)


class CountingPool:
    """Client pool that tracks every handle it hands out."""

    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self._lock = threading.Lock()
        self.borrowed = 0
        self.returned = 0

    @property
    def outstanding(self) -> int:
        return self.borrowed - self.returned

    def acquire(self) -> FakeClient:
        with self._lock:
            self.borrowed += 1
        return FakeClient(self.store)

    def release(self, client: FakeClient) -> None:
        assert not client.closed, "handle returned twice"
        client.closed = True
        with self._lock:
            self.returned += 1


class AsyncCountingPool:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.borrowed = 0
        self.returned = 0

    @property
    def outstanding(self) -> int:
        return self.borrowed - self.returned

    async def acquire(self) -> FakeAsyncClient:
        self.borrowed += 1
        return FakeAsyncClient(self.store)

    async def release(self, client: FakeAsyncClient) -> None:
        assert not client.closed, "handle returned twice"
        client.closed = True
        self.returned += 1


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def pool(store: FakeStore) -> CountingPool:
    return CountingPool(store)


@pytest.fixture
def async_pool(store: FakeStore) -> AsyncCountingPool:
    return AsyncCountingPool(store)
