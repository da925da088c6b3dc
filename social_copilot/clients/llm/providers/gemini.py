"""Google Gemini LLM provider: BaseLLMClient implementation + registry builder."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types as genai_types

from social_copilot.clients.llm.base import BaseLLMClient, LLMMessage

logger = logging.getLogger(__name__)


class GeminiLLMClient(BaseLLMClient):
    """Google Gemini client (gemini-2.0-flash, gemini-1.5-pro, ...)."""

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        temperature: float = 0.8,
    ) -> None:
        self._model = model or "gemini-2.0-flash"
        self._temperature = temperature
        resolved_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        self._client = genai.Client(api_key=resolved_key)

    @property
    def provider(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str, *, max_tokens: Optional[int] = None) -> str:
        return await self.chat([{"role": "user", "content": prompt}], max_tokens=max_tokens)

    async def chat(self, messages: List[LLMMessage], *, max_tokens: Optional[int] = None) -> str:
        """Native multi-turn chat with system-instruction support."""
        system_parts: List[str] = []
        history: List[Dict[str, Any]] = []

        for msg in messages:
            content = (msg.get("content") or "").strip()
            if not content:
                continue
            role = msg.get("role", "user")
            if role == "system":
                system_parts.append(content)
            elif role == "assistant":
                history.append({"role": "model", "parts": [{"text": content}]})
            else:
                history.append({"role": "user", "parts": [{"text": content}]})

        cfg_kwargs: Dict[str, Any] = {"temperature": self._temperature}
        if system_parts:
            cfg_kwargs["system_instruction"] = "\n\n".join(system_parts)
        if max_tokens is not None:
            cfg_kwargs["max_output_tokens"] = max_tokens

        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=history,
            config=genai_types.GenerateContentConfig(**cfg_kwargs),
        )
        return response.text or ""

    async def test_connection(self) -> bool:
        try:
            await self.complete("Say OK", max_tokens=5)
            return True
        except Exception as exc:
            logger.info("gemini test_connection failed: %s", exc)
            return False


def gemini_builder(config: Dict[str, Any]) -> GeminiLLMClient:
    return GeminiLLMClient(
        model=config.get("model"),
        api_key=config.get("api_key"),
        temperature=float(config.get("temperature", 0.8)),
    )
