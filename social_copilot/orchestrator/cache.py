"""Result cache: bounded LRU with TTL expiry for successful backend outputs."""
from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from social_copilot.replies.types import LLMOutput

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: LLMOutput
    inserted_at: float


class ResultCache:
    """LRU cache keyed on the request key with TTL expiry.

    Recency and expiry are independent: a hit promotes the entry but does not
    refresh ``inserted_at``. Expired entries are dropped lazily on ``get``.
    Both ``get`` and ``set`` are O(1) on the underlying OrderedDict.
    """

    def __init__(
        self,
        capacity: int = 100,
        ttl_seconds: float = 300.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds!r}")
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._clock = clock
        # Oldest first; the last item is the most recently used
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> Optional[LLMOutput]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at > self._ttl:
            self._store.pop(key, None)
            logger.debug("ResultCache: expired %s", key)
            return None
        self._store.move_to_end(key)
        return entry.value

    def set(self, key: str, value: LLMOutput) -> None:
        self._store[key] = CacheEntry(value=value, inserted_at=self._clock())
        self._store.move_to_end(key)
        while len(self._store) > self._capacity:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("ResultCache: evicted %s", evicted)

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl
