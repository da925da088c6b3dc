"""OpenAI LLM provider: BaseLLMClient implementation + registry builder."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from social_copilot.clients.llm.base import BaseLLMClient, LLMMessage, normalize_base_url

logger = logging.getLogger(__name__)


class OpenAILLMClient(BaseLLMClient):
    """OpenAI-compatible chat completions client (GPT-4o, GPT-4o-mini, ...)."""

    provider_name = "openai"
    default_model = "gpt-4o-mini"
    default_base_url: Optional[str] = None
    api_key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.8,
        timeout: Optional[float] = None,
    ) -> None:
        self._model = model or self.default_model
        self._temperature = temperature
        base = normalize_base_url(base_url) or self.default_base_url
        client_kwargs: Dict[str, Any] = {
            "api_key": api_key or os.environ.get(self.api_key_env),
            # SDK paths are relative to .../v1
            "base_url": f"{base}/v1" if base else None,
            # Failover is handled by the orchestrator; no SDK-level retries
            "max_retries": 0,
        }
        if timeout is not None:
            client_kwargs["timeout"] = float(timeout)
        self._client = AsyncOpenAI(**client_kwargs)

    @property
    def provider(self) -> str:
        return self.provider_name

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str, *, max_tokens: Optional[int] = None) -> str:
        return await self.chat([{"role": "user", "content": prompt}], max_tokens=max_tokens)

    async def chat(self, messages: List[LLMMessage], *, max_tokens: Optional[int] = None) -> str:
        """Native chat with system-prompt support."""
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": list(messages),
            "temperature": self._temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        response = await self._client.chat.completions.create(**kwargs)
        if not response.choices:
            raise ValueError(f"Invalid {self.provider_name} response: missing choices")
        return response.choices[0].message.content or ""

    async def test_connection(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except Exception as exc:
            logger.info("%s test_connection failed: %s", self.provider_name, exc)
            return False


def openai_builder(config: Dict[str, Any]) -> OpenAILLMClient:
    return OpenAILLMClient(
        model=config.get("model"),
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),
        temperature=float(config.get("temperature", 0.8)),
        timeout=config.get("timeout"),
    )
