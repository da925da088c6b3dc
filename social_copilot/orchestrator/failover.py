"""
Primary/fallback failover policy.

States of the primary:

    HEALTHY   -> call the primary.
    DEGRADED  -> the primary failed before; call it again to check for recovery.
    COOLDOWN  -> the primary failed repeatedly and recently; skip it and record
                 a CooldownError as its attempt.

A first failure never starts a cooldown: the next call always retries the
primary. Only once ``primary_failure_count > 1`` does the controller hold the
primary off for ``cooldown_seconds`` after the latest failure.
"""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from social_copilot.core.exceptions import AllProvidersFailedError, CooldownError
from social_copilot.orchestrator.events import OrchestratorEvents
from social_copilot.orchestrator.retry import invoke_with_retry
from social_copilot.replies.backend import ReplyBackend
from social_copilot.replies.types import LLMInput, LLMOutput

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 15.0


class ProviderState(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    COOLDOWN = "cooldown"


class FailoverController:
    def __init__(
        self,
        primary: ReplyBackend,
        fallback: Optional[ReplyBackend] = None,
        *,
        events: Optional[OrchestratorEvents] = None,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.events = events if events is not None else OrchestratorEvents()
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self.primary_failed = False
        self.primary_failed_at = 0.0
        self.primary_failure_count = 0

    @property
    def state(self) -> ProviderState:
        if not self.primary_failed:
            return ProviderState.HEALTHY
        if self._within_cooldown():
            return ProviderState.COOLDOWN
        return ProviderState.DEGRADED

    def has_fallback(self) -> bool:
        return self.fallback is not None

    def active_provider(self) -> str:
        if self.primary_failed and self.fallback is not None:
            return self.fallback.name
        return self.primary.name

    def reset(self) -> None:
        self.primary_failed = False
        self.primary_failed_at = 0.0
        self.primary_failure_count = 0

    def _within_cooldown(self) -> bool:
        return (
            self.primary_failure_count > 1
            and self._clock() - self.primary_failed_at < self.cooldown_seconds
        )

    def _record_primary_failure(self) -> None:
        if self.primary_failed:
            self.primary_failure_count += 1
        else:
            self.primary_failed = True
            self.primary_failure_count = 1
        self.primary_failed_at = self._clock()

    async def execute(self, input: LLMInput) -> LLMOutput:
        """Run the policy for one request. Raises AllProvidersFailedError."""
        attempts: List[Tuple[str, BaseException]] = []
        primary = self.primary
        state = self.state

        if state is ProviderState.COOLDOWN:
            primary_error: BaseException = CooldownError(primary.name, self.cooldown_seconds)
            attempts.append((primary.name, primary_error))
            logger.debug("Primary %s skipped (cooldown, %d failures)", primary.name, self.primary_failure_count)
        else:
            try:
                result = await invoke_with_retry(primary, input)
            except Exception as exc:
                primary_error = exc
                attempts.append((primary.name, exc))
                self._record_primary_failure()
                logger.warning(
                    "Primary %s failed (count=%d): %s",
                    primary.name, self.primary_failure_count, exc,
                )
            else:
                if state is ProviderState.DEGRADED:
                    self.reset()
                    logger.info("Primary %s recovered", primary.name)
                    self.events.emit_recovery(primary.name)
                return result

        fallback = self.fallback
        if fallback is not None:
            self.events.emit_fallback(primary.name, fallback.name, primary_error)
            logger.info("Falling back from %s to %s", primary.name, fallback.name)
            try:
                return await invoke_with_retry(fallback, input)
            except Exception as exc:
                attempts.append((fallback.name, exc))
                logger.warning("Fallback %s failed: %s", fallback.name, exc)

        error = AllProvidersFailedError(attempts)
        logger.error("%s", error)
        self.events.emit_all_failed(error.errors)
        raise error
