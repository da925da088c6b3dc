"""Single corrective retry when a backend returns malformed reply content."""
from __future__ import annotations

import dataclasses
import logging

from social_copilot.core.exceptions import ErrorKind, error_kind
from social_copilot.replies.backend import ReplyBackend
from social_copilot.replies.budgets import (
    DEFAULT_INPUT_BUDGETS,
    InputBudgets,
    clamp_head,
    normalize_text,
)
from social_copilot.replies.types import LLMInput, LLMOutput

logger = logging.getLogger(__name__)

STRICT_JSON_INSTRUCTION = (
    'Return ONLY a strict JSON array: [{"style":"...","text":"..."}] '
    "with no extra commentary."
)


def with_strict_json_hint(
    input: LLMInput, budgets: InputBudgets = DEFAULT_INPUT_BUDGETS,
) -> LLMInput:
    """
    Copy of *input* whose thought_hint ends with the strict-JSON instruction.

    The caller's hint is clamped first so the combined hint fits the hint
    budget and the instruction survives prompt-time clamping.
    """
    room = budgets.max_thought_hint_chars - len(STRICT_JSON_INSTRUCTION) - 1
    user_hint = clamp_head(normalize_text(input.thought_hint or ""), room)
    hint = f"{user_hint}\n{STRICT_JSON_INSTRUCTION}".strip()
    return dataclasses.replace(input, thought_hint=hint)


async def invoke_with_retry(backend: ReplyBackend, input: LLMInput) -> LLMOutput:
    """
    Call *backend* once; on an OUTPUT_PARSE failure call it exactly once more
    with a stricter hint. Other failures, and a second parse failure, propagate.
    """
    try:
        return await backend.generate_reply(input)
    except Exception as exc:
        if error_kind(exc) is not ErrorKind.OUTPUT_PARSE:
            raise
        logger.info("%s: malformed output, retrying with strict JSON hint: %s", backend.name, exc)
    return await backend.generate_reply(with_strict_json_hint(input))
