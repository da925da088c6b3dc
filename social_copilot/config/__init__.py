"""
Orchestrator config: build in code, from a settings payload, or from env.

    OrchestratorSettings.from_dict({...})   # host settings storage (camelCase ok)
    OrchestratorSettings.from_env()         # COPILOT_* variables
"""
from social_copilot.config.orchestrator import (
    CacheSettings,
    OrchestratorSettings,
    ProviderSettings,
)

__all__ = [
    "CacheSettings",
    "OrchestratorSettings",
    "ProviderSettings",
]
