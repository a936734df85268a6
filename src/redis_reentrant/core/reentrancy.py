"""Per-execution-context reentrancy bookkeeping.

Each table maps lock keys to a positive depth and belongs to exactly one
execution context: the running asyncio task when there is one, otherwise
the current thread. Tables are kept in a ``ContextVar`` so they follow the
logical context rather than the OS thread. Child tasks (and, on newer
interpreters, child threads) start from a copy of their parent's context;
the owner check below makes them install a fresh table instead of reusing
the parent's.
"""

from __future__ import annotations

import asyncio
import itertools
import threading
import weakref
from contextvars import ContextVar
from typing import Any, Dict, Optional, Tuple


_table_ids = itertools.count()


def current_context_owner() -> Any:
    """Return the object identifying the current execution context."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return task if task is not None else threading.current_thread()


class ReentrancyTable:
    """``key -> depth`` mapping private to one execution context."""

    __slots__ = ("_owner", "_depths")

    def __init__(self, owner: Any) -> None:
        self._owner = weakref.ref(owner)
        self._depths: Dict[str, int] = {}

    def owned_by(self, owner: Any) -> bool:
        return self._owner() is owner

    def get(self, key: str) -> Optional[int]:
        return self._depths.get(key)

    def set(self, key: str, depth: int) -> None:
        if depth < 1:
            raise ValueError(f"Depth must be positive, got {depth}")
        self._depths[key] = depth

    def remove(self, key: str) -> None:
        self._depths.pop(key, None)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._depths)

    def __len__(self) -> int:
        return len(self._depths)


class ContextLocalTables:
    """Lazily creates and hands out the current context's :class:`ReentrancyTable`."""

    def __init__(self, name: str = "redis_reentrant") -> None:
        self._var: ContextVar[Optional[ReentrancyTable]] = ContextVar(
            f"{name}_table_{next(_table_ids)}", default=None
        )

    def current(self) -> ReentrancyTable:
        owner = current_context_owner()
        table = self._var.get()
        if table is None or not table.owned_by(owner):
            table = ReentrancyTable(owner)
            self._var.set(table)
        return table

    def peek(self) -> Optional[ReentrancyTable]:
        """Return the current context's table without creating one."""
        table = self._var.get()
        if table is None or not table.owned_by(current_context_owner()):
            return None
        return table
