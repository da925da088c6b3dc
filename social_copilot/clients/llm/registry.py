"""
LLM provider registry: map provider name -> build client from config dict.

Register a provider, then let the backend factory build clients from
ProviderSettings.to_client_config().
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from social_copilot.clients.llm.base import BaseLLMClient
from social_copilot.core.exceptions import ConfigurationError

ClientBuilder = Callable[[Dict[str, Any]], BaseLLMClient]


class LLMRegistry:
    """Maps provider id to a builder that takes a config dict and returns BaseLLMClient."""

    def __init__(self) -> None:
        self._builders: Dict[str, ClientBuilder] = {}

    def register(self, provider: str, builder: ClientBuilder) -> None:
        """Register a builder for this provider. builder(config_dict) -> BaseLLMClient."""
        self._builders[provider] = builder

    def get(self, provider: str) -> ClientBuilder | None:
        return self._builders.get(provider)

    @property
    def names(self) -> List[str]:
        return sorted(self._builders)

    def __contains__(self, provider: object) -> bool:
        return provider in self._builders

    def build(self, provider: str, config: Dict[str, Any]) -> BaseLLMClient:
        """Build a client for this provider. Raises ConfigurationError if unknown."""
        builder = self._builders.get(provider)
        if builder is None:
            raise ConfigurationError(
                f"Unknown LLM provider: {provider!r}. Registered: {self.names}",
                details={"provider": provider},
            )
        return builder(config)


# Builder table with the built-in providers; holds no per-request state.
default_registry = LLMRegistry()

from social_copilot.clients.llm.providers.claude import claude_builder  # noqa: E402
from social_copilot.clients.llm.providers.deepseek import deepseek_builder  # noqa: E402
from social_copilot.clients.llm.providers.gemini import gemini_builder  # noqa: E402
from social_copilot.clients.llm.providers.openai import openai_builder  # noqa: E402

default_registry.register("deepseek", deepseek_builder)
default_registry.register("openai", openai_builder)
default_registry.register("claude", claude_builder)
default_registry.register("gemini", gemini_builder)
