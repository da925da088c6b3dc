"""
Reply orchestration: caching, deduplication and failover over reply backends.

    from social_copilot.orchestrator import Orchestrator, OrchestratorEvents
"""
from social_copilot.orchestrator.cache import ResultCache
from social_copilot.orchestrator.coordinator import RequestCoordinator
from social_copilot.orchestrator.events import OrchestratorEvents
from social_copilot.orchestrator.failover import FailoverController, ProviderState
from social_copilot.orchestrator.keys import CacheKeyEncoder
from social_copilot.orchestrator.orchestrator import Orchestrator
from social_copilot.orchestrator.retry import STRICT_JSON_INSTRUCTION, invoke_with_retry
from social_copilot.orchestrator.types import CacheStats

__all__ = [
    "CacheKeyEncoder",
    "CacheStats",
    "FailoverController",
    "Orchestrator",
    "OrchestratorEvents",
    "ProviderState",
    "RequestCoordinator",
    "ResultCache",
    "STRICT_JSON_INSTRUCTION",
    "invoke_with_retry",
]
