"""Observer callbacks for failover activity. Listeners never throw into the caller."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

FallbackListener = Callable[[str, str, BaseException], None]
RecoveryListener = Callable[[str], None]
AllFailedListener = Callable[[List[BaseException]], None]


@dataclass
class OrchestratorEvents:
    on_fallback: Optional[FallbackListener] = None
    on_recovery: Optional[RecoveryListener] = None
    on_all_failed: Optional[AllFailedListener] = None

    def emit_fallback(self, from_name: str, to_name: str, error: BaseException) -> None:
        self._emit("on_fallback", self.on_fallback, from_name, to_name, error)

    def emit_recovery(self, name: str) -> None:
        self._emit("on_recovery", self.on_recovery, name)

    def emit_all_failed(self, errors: List[BaseException]) -> None:
        self._emit("on_all_failed", self.on_all_failed, list(errors))

    @staticmethod
    def _emit(event: str, listener: Optional[Callable[..., None]], *args) -> None:
        if listener is None:
            return
        try:
            listener(*args)
        except Exception as exc:
            logger.warning("%s listener raised %s: %s", event, type(exc).__name__, exc)
