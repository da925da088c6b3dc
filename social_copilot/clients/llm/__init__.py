"""
LLM clients: base, registry, providers.

Provider registration: default_registry.register(provider, builder).
Reply generation on top of a client: social_copilot.replies.backend.
"""
from social_copilot.clients.llm.base import BaseLLMClient, LLMMessage, normalize_base_url
from social_copilot.clients.llm.registry import LLMRegistry, default_registry

__all__ = [
    "BaseLLMClient",
    "LLMMessage",
    "LLMRegistry",
    "default_registry",
    "normalize_base_url",
]
