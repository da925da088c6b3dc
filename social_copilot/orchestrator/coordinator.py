"""In-flight request deduplication: one shared task per request key."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCoordinator:
    """
    Shares a single running task among every caller that asks for the same key.

    The key is released inside the task itself (in ``finally``), so by the time
    any waiter is resumed a new call with that key starts fresh work instead of
    reusing a settled task. Waiters await through ``asyncio.shield``: cancelling
    one caller does not cancel the work the others are waiting on.
    """

    def __init__(self) -> None:
        self._pending: Dict[str, "asyncio.Task"] = {}

    def pending(self, key: str) -> Optional["asyncio.Task"]:
        return self._pending.get(key)

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    def start(self, key: str, factory: Callable[[], Awaitable[T]]) -> "asyncio.Task[T]":
        """Start *factory()* under *key*, or return the task already running for it."""
        existing = self._pending.get(key)
        if existing is not None:
            return existing

        async def run() -> T:
            try:
                return await factory()
            finally:
                self._pending.pop(key, None)

        task = asyncio.ensure_future(run())
        task.add_done_callback(_consume_exception)
        self._pending[key] = task
        return task

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        return await asyncio.shield(self.start(key, factory))


def _consume_exception(task: "asyncio.Task") -> None:
    # Waiters re-raise the error themselves; mark it retrieved so a task whose
    # callers were all cancelled does not log "exception was never retrieved".
    if not task.cancelled():
        task.exception()
