"""Anthropic Claude provider over the Messages API (plain httpx, no SDK)."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from social_copilot.clients.llm.base import BaseLLMClient, LLMMessage, normalize_base_url
from social_copilot.core.exceptions import BackendError

logger = logging.getLogger(__name__)

_ANTHROPIC_VERSION = "2023-06-01"
_DEFAULT_MAX_TOKENS = 1000


class ClaudeLLMClient(BaseLLMClient):
    """Claude client. System messages go into the top-level ``system`` field."""

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.8,
        timeout: Optional[float] = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._model = model or "claude-sonnet-4-5"
        self._api_key = (api_key or os.environ.get("ANTHROPIC_API_KEY") or "").strip()
        self._base_url = normalize_base_url(base_url) or "https://api.anthropic.com"
        self._temperature = temperature
        self._timeout = timeout
        self._transport = transport

    @property
    def provider(self) -> str:
        return "claude"

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str, *, max_tokens: Optional[int] = None) -> str:
        return await self.chat([{"role": "user", "content": prompt}], max_tokens=max_tokens)

    async def chat(self, messages: List[LLMMessage], *, max_tokens: Optional[int] = None) -> str:
        system_parts: List[str] = []
        turns: List[Dict[str, str]] = []
        for msg in messages:
            content = (msg.get("content") or "").strip()
            if not content:
                continue
            if msg.get("role") == "system":
                system_parts.append(content)
            else:
                turns.append({"role": msg.get("role", "user"), "content": content})

        body: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens or _DEFAULT_MAX_TOKENS,
            "temperature": self._temperature,
            "messages": turns,
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)

        data = await self._post("/v1/messages", body)
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list) or not blocks:
            raise BackendError("Claude API error: response has no content blocks", provider="claude")
        return "".join(
            b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type", "text") == "text"
        )

    async def _post(self, path: str, body: Dict[str, Any]) -> Any:
        headers = {
            "content-type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": _ANTHROPIC_VERSION,
        }
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = await client.post(path, json=body, headers=headers)

        if response.is_success:
            return response.json()

        try:
            detail = response.json().get("error", {}).get("message")
        except (ValueError, AttributeError):
            detail = None
        raise BackendError(
            f"Claude API error: {detail or f'status {response.status_code}'}",
            provider="claude",
            status_code=response.status_code,
        )

    async def test_connection(self) -> bool:
        try:
            await self.complete("Say OK", max_tokens=5)
            return True
        except Exception as exc:
            logger.info("claude test_connection failed: %s", exc)
            return False


def claude_builder(config: Dict[str, Any]) -> ClaudeLLMClient:
    return ClaudeLLMClient(
        model=config.get("model"),
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),
        temperature=float(config.get("temperature", 0.8)),
        timeout=config.get("timeout", 20.0),
    )
