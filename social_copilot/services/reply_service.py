"""
Reply service: the composition point that wires settings, LLM registry, prompt
hooks and event listeners into an Orchestrator.

Library code takes its collaborators by injection. The process-wide default
orchestrator and the default PromptHookRegistry live here and nowhere else.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from social_copilot.clients.llm.registry import LLMRegistry, default_registry
from social_copilot.config import OrchestratorSettings
from social_copilot.core.exceptions import ConfigurationError
from social_copilot.core.logger import get_logger
from social_copilot.orchestrator import Orchestrator, OrchestratorEvents
from social_copilot.replies.backend import BackendFactory
from social_copilot.replies.hooks import PromptHookRegistry

logger = get_logger(__name__)

default_hooks = PromptHookRegistry()

_default: Optional[Orchestrator] = None


def build_orchestrator(
    settings: OrchestratorSettings,
    *,
    events: Optional[OrchestratorEvents] = None,
    registry: Optional[LLMRegistry] = None,
    hooks: Optional[PromptHookRegistry] = None,
) -> Orchestrator:
    """Create an Orchestrator whose backends come from *registry* (default: all providers)."""
    factory = BackendFactory(registry=registry, hooks=hooks if hooks is not None else default_hooks)
    orch = Orchestrator(settings, events=events, backend_factory=factory)
    logger.info(
        "ReplyService: orchestrator built (primary=%s, fallback=%s)",
        settings.primary.provider,
        settings.fallback.provider if settings.fallback else None,
    )
    return orch


def configure_default(
    settings: OrchestratorSettings,
    *,
    events: Optional[OrchestratorEvents] = None,
    registry: Optional[LLMRegistry] = None,
    hooks: Optional[PromptHookRegistry] = None,
) -> Orchestrator:
    """Build the process-wide orchestrator, replacing any previous one."""
    global _default
    _default = build_orchestrator(settings, events=events, registry=registry, hooks=hooks)
    return _default


def get_default() -> Orchestrator:
    if _default is None:
        raise ConfigurationError(
            "Default orchestrator is not configured; call configure_default() first"
        )
    return _default


def reset_default() -> None:
    """Forget the process-wide orchestrator and clear the default prompt hooks."""
    global _default
    _default = None
    default_hooks.clear()


async def check_connections(
    settings: OrchestratorSettings,
    *,
    registry: Optional[LLMRegistry] = None,
) -> List[Tuple[str, str, bool]]:
    """
    Build a client for each configured provider and call its test_connection().

    Returns (role, provider, ok) for the primary and, when configured, the
    fallback. A provider the registry does not know raises ConfigurationError.
    """
    registry = registry if registry is not None else default_registry
    targets = [("primary", settings.primary)]
    if settings.fallback is not None:
        targets.append(("fallback", settings.fallback))

    results: List[Tuple[str, str, bool]] = []
    for role, provider in targets:
        client = registry.build(provider.provider, provider.to_client_config())
        ok = await client.test_connection()
        if not ok:
            logger.warning("ReplyService: %s provider %s failed connection check", role, provider.provider)
        results.append((role, provider.provider, ok))
    return results
