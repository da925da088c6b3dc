"""
Orchestrator: cache lookup, in-flight deduplication and primary/fallback
failover in front of two reply backends.

    orch = Orchestrator(settings, events=OrchestratorEvents(on_fallback=...))
    output = await orch.generate_reply(llm_input)

Flow per call: request key -> ResultCache (hit returns at once) -> shared task
from RequestCoordinator -> FailoverController (each attempt wrapped in the
parse-error retry) -> successful output stored in the cache.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from social_copilot.config import OrchestratorSettings, ProviderSettings
from social_copilot.orchestrator.cache import ResultCache
from social_copilot.orchestrator.coordinator import RequestCoordinator
from social_copilot.orchestrator.events import OrchestratorEvents
from social_copilot.orchestrator.failover import FailoverController
from social_copilot.orchestrator.keys import CacheKeyEncoder
from social_copilot.orchestrator.types import CacheStats
from social_copilot.replies.backend import BackendFactory, ReplyBackend
from social_copilot.replies.types import LLMInput, LLMOutput

logger = logging.getLogger(__name__)

BackendBuilder = Callable[[ProviderSettings], ReplyBackend]


class Orchestrator:
    def __init__(
        self,
        settings: OrchestratorSettings,
        *,
        events: Optional[OrchestratorEvents] = None,
        backend_factory: Optional[BackendBuilder] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._events = events if events is not None else OrchestratorEvents()
        self._backend_factory: BackendBuilder = (
            backend_factory if backend_factory is not None else BackendFactory()
        )
        self._clock = clock
        self._keys = CacheKeyEncoder()
        self._hits = 0
        self._misses = 0
        self._apply(settings)

    def _apply(self, settings: OrchestratorSettings) -> None:
        primary = self._backend_factory(settings.primary)
        fallback = (
            self._backend_factory(settings.fallback) if settings.fallback is not None else None
        )
        self._failover = FailoverController(
            primary,
            fallback,
            events=self._events,
            cooldown_seconds=settings.cooldown_seconds,
            clock=self._clock,
        )
        # Work started under a previous configuration stays with its own coordinator
        self._coordinator = RequestCoordinator()
        self._cache: Optional[ResultCache] = None
        if settings.cache.enabled:
            self._cache = ResultCache(
                settings.cache.size, settings.cache.ttl_seconds, clock=self._clock,
            )
        self.settings = settings
        logger.info(
            "Orchestrator configured: primary=%s fallback=%s cache=%s",
            primary.name,
            fallback.name if fallback is not None else None,
            f"{settings.cache.size}/{settings.cache.ttl_seconds:g}s" if self._cache else "off",
        )

    async def generate_reply(self, input: LLMInput) -> LLMOutput:
        """
        Return a reply for *input*, from cache when possible.

        Concurrent calls with the same request key share one backend call.
        Raises AllProvidersFailedError when every configured backend failed;
        failures are never cached.
        """
        key = self._keys.encode(input)
        cache = self._cache

        if cache is not None:
            cached = cache.get(key)
            if cached is not None:
                self._hits += 1
                logger.debug("Cache hit %s", key)
                return cached

        task = self._coordinator.pending(key)
        if task is None:
            if cache is not None:
                self._misses += 1
            failover = self._failover

            async def work() -> LLMOutput:
                result = await failover.execute(input)
                if cache is not None:
                    cache.set(key, result)
                return result

            task = self._coordinator.start(key, work)
        else:
            logger.debug("Joining in-flight request %s", key)
        return await asyncio.shield(task)

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses)

    def clear_cache(self) -> None:
        """Drop cached outputs and reset hit/miss counters."""
        if self._cache is not None:
            self._cache.clear()
        self._hits = 0
        self._misses = 0

    def reset_primary_state(self) -> None:
        self._failover.reset()

    def has_fallback(self) -> bool:
        return self._failover.has_fallback()

    def get_active_provider(self) -> str:
        return self._failover.active_provider()

    def update_config(self, settings: OrchestratorSettings) -> None:
        """
        Swap backends, reset failover state, rebuild or disable the cache.

        Requests already in flight finish on the old backends; later calls
        never join them.
        """
        self._apply(settings)
        self.clear_cache()

    @property
    def cache(self) -> Optional[ResultCache]:
        return self._cache

    @property
    def failover(self) -> FailoverController:
        return self._failover
