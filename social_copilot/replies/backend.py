"""Reply backends: a named unit that turns an LLMInput into an LLMOutput or fails.

The orchestrator only sees the ReplyBackend protocol. LLMReplyBackend is the
concrete implementation on top of a BaseLLMClient; it owns prompt building,
the per-call deadline and output parsing, and maps every failure onto the
project taxonomy (OutputParseError for bad content, BackendError otherwise).
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

from social_copilot.clients.llm.registry import LLMRegistry, default_registry
from social_copilot.core.exceptions import BackendError, ErrorKind, error_kind
from social_copilot.core.redact import redact_secrets
from social_copilot.replies.hooks import PromptHookRegistry
from social_copilot.replies.prompts import build_system_prompt, build_user_prompt
from social_copilot.replies.types import LLMInput, LLMOutput
from social_copilot.replies.validation import parse_reply_content

if TYPE_CHECKING:
    from social_copilot.clients.llm.base import BaseLLMClient, LLMMessage
    from social_copilot.config import ProviderSettings

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
MAX_TOKENS_CAP = 2000


@runtime_checkable
class ReplyBackend(Protocol):
    name: str

    async def generate_reply(self, input: LLMInput) -> LLMOutput:
        ...


def clamp_max_tokens(max_length: Optional[int]) -> int:
    return max(1, min(max_length or DEFAULT_MAX_TOKENS, MAX_TOKENS_CAP))


class LLMReplyBackend:
    """ReplyBackend backed by an LLM client. ``name`` is the client's provider id."""

    def __init__(
        self,
        client: "BaseLLMClient",
        *,
        hooks: Optional[PromptHookRegistry] = None,
        timeout_seconds: Optional[float] = 20.0,
    ) -> None:
        self._client = client
        self._hooks = hooks if hooks is not None else PromptHookRegistry()
        self._timeout_seconds = timeout_seconds
        self.name = client.provider

    @property
    def model(self) -> str:
        return self._client.model

    def build_messages(self, input: LLMInput) -> List["LLMMessage"]:
        system_prompt = self._hooks.apply_system_hooks(build_system_prompt(input), input)
        user_prompt = self._hooks.apply_user_hooks(build_user_prompt(input), input)
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    async def generate_reply(self, input: LLMInput) -> LLMOutput:
        started = time.monotonic()
        messages = self.build_messages(input)
        try:
            coro = self._client.chat(messages, max_tokens=clamp_max_tokens(input.max_length))
            if self._timeout_seconds is not None and self._timeout_seconds > 0:
                coro = asyncio.wait_for(coro, timeout=self._timeout_seconds)
            content = await coro
        except asyncio.TimeoutError as exc:
            logger.warning("%s: request timed out (%.0fs)", self.name, self._timeout_seconds or 0)
            raise BackendError(
                f"Request timed out after {self._timeout_seconds:g}s",
                provider=self.name,
                cause=exc,
            ) from exc
        except Exception as exc:
            if error_kind(exc) is ErrorKind.BACKEND:
                raise
            raise BackendError(
                redact_secrets(f"{self.name} API error: {exc}"),
                provider=self.name,
                cause=exc,
            ) from exc

        candidates = parse_reply_content(content, input.styles, input.task)
        latency_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "%s: %d candidate(s) in %.0fms", self.name, len(candidates), latency_ms,
        )
        return LLMOutput(
            candidates=candidates,
            model=self._client.model,
            latency_ms=latency_ms,
            raw=content,
        )


class BackendFactory:
    """Builds LLMReplyBackend instances from ProviderSettings."""

    def __init__(
        self,
        registry: Optional[LLMRegistry] = None,
        hooks: Optional[PromptHookRegistry] = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        self._hooks = hooks if hooks is not None else PromptHookRegistry()

    def __call__(self, settings: "ProviderSettings") -> ReplyBackend:
        return self.build(settings)

    def build(self, settings: "ProviderSettings") -> LLMReplyBackend:
        client = self._registry.build(settings.provider, settings.to_client_config())
        return LLMReplyBackend(
            client,
            hooks=self._hooks,
            timeout_seconds=settings.timeout_seconds,
        )
