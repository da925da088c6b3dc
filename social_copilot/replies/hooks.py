"""Prompt hooks: caller-supplied transforms applied to prompts before a backend call.

A registry is an ordinary object handed to each backend at construction.
Hooks never break a request: a hook that raises is logged and skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

if TYPE_CHECKING:
    from social_copilot.replies.types import LLMInput

logger = logging.getLogger(__name__)

PromptTransform = Callable[[str, "LLMInput"], str]


@dataclass(frozen=True)
class PromptHook:
    name: str
    transform_system_prompt: Optional[PromptTransform] = None
    transform_user_prompt: Optional[PromptTransform] = None


class PromptHookRegistry:
    """Ordered collection of prompt hooks."""

    def __init__(self, hooks: Optional[List[PromptHook]] = None) -> None:
        self._hooks: List[PromptHook] = list(hooks or [])

    def register(self, hook: PromptHook) -> None:
        self._hooks.append(hook)

    def clear(self) -> None:
        self._hooks.clear()

    @property
    def hooks(self) -> Tuple[PromptHook, ...]:
        return tuple(self._hooks)

    def apply_system_hooks(self, prompt: str, input: "LLMInput") -> str:
        return self._apply(prompt, input, "transform_system_prompt")

    def apply_user_hooks(self, prompt: str, input: "LLMInput") -> str:
        return self._apply(prompt, input, "transform_user_prompt")

    def _apply(self, prompt: str, input: "LLMInput", attr: str) -> str:
        current = prompt
        for hook in self._hooks:
            transform = getattr(hook, attr)
            if transform is None:
                continue
            try:
                current = transform(current, input)
            except Exception as exc:
                logger.warning("prompt hook %r %s failed: %s", hook.name, attr, exc)
        return current
