"""
Size limits for free-text fields of LLMInput before they reach a prompt.

Memory summary and thought hint keep their head; profile notes keep their tail
(the newest notes are appended last).
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from social_copilot.replies.types import LLMInput


@dataclass(frozen=True)
class InputBudgets:
    max_memory_summary_chars: int = 2000
    max_thought_hint_chars: int = 600
    max_profile_notes_chars: int = 2048


DEFAULT_INPUT_BUDGETS = InputBudgets()


def normalize_text(value: str) -> str:
    return value.replace("\r\n", "\n").strip()


def clamp_head(value: str, max_chars: int) -> str:
    if max_chars <= 0:
        return ""
    return value[:max_chars]


def clamp_tail(value: str, max_chars: int) -> str:
    if max_chars <= 0:
        return ""
    return value[-max_chars:] if len(value) > max_chars else value


def _clamp_optional(value: Optional[str], max_chars: int, *, tail: bool = False) -> Optional[str]:
    if value is None:
        return None
    text = normalize_text(value)
    return clamp_tail(text, max_chars) if tail else clamp_head(text, max_chars)


def normalize_and_clamp_input(
    input: LLMInput, budgets: InputBudgets = DEFAULT_INPUT_BUDGETS,
) -> LLMInput:
    """Return a copy of *input* with CRLF normalized, text trimmed and budgets applied."""
    profile = input.profile
    if profile is not None and profile.notes is not None:
        profile = dataclasses.replace(
            profile,
            notes=_clamp_optional(profile.notes, budgets.max_profile_notes_chars, tail=True),
        )
    return dataclasses.replace(
        input,
        profile=profile,
        memory_summary=_clamp_optional(input.memory_summary, budgets.max_memory_summary_chars),
        thought_hint=_clamp_optional(input.thought_hint, budgets.max_thought_hint_chars),
    )
