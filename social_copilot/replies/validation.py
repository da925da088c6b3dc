"""Parse a backend's raw text into reply candidates.

Models often wrap the JSON array in prose or markdown fences, so parsing
tries a strict ``json.loads`` first and falls back to the first balanced
JSON block in the text. Anything that still does not yield valid
candidates raises OutputParseError, which the orchestrator retries once.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from social_copilot.core.exceptions import OutputParseError
from social_copilot.replies.types import LLMTask, ReplyCandidate, ReplyStyle

logger = logging.getLogger(__name__)

DEFAULT_MAX_JSON_SCAN_CHARS = 200_000
DEFAULT_CONFIDENCE = 0.8

ALLOWED_STYLES = frozenset(s.value for s in ReplyStyle)

_EN_ALIASES = {
    "humor": ReplyStyle.HUMOROUS,
    "fun": ReplyStyle.HUMOROUS,
    "joke": ReplyStyle.HUMOROUS,
    "care": ReplyStyle.CARING,
    "empathetic": ReplyStyle.CARING,
    "empathy": ReplyStyle.CARING,
    "reason": ReplyStyle.RATIONAL,
    "rationality": ReplyStyle.RATIONAL,
    "advice": ReplyStyle.RATIONAL,
    "solution": ReplyStyle.RATIONAL,
    "chill": ReplyStyle.CASUAL,
    "friendly": ReplyStyle.CASUAL,
    "polite": ReplyStyle.FORMAL,
    "professional": ReplyStyle.FORMAL,
}

# Substring match, checked in order
_ZH_ALIASES = (
    (("幽默", "搞笑", "玩笑"), ReplyStyle.HUMOROUS),
    (("关心", "体贴", "安慰", "共情"), ReplyStyle.CARING),
    (("理性", "客观", "建议", "方案", "解决"), ReplyStyle.RATIONAL),
    (("随意", "轻松", "日常"), ReplyStyle.CASUAL),
    (("正式", "礼貌", "职业", "工作"), ReplyStyle.FORMAL),
)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[str] = field(default_factory=list)


def normalize_reply_style(raw: Any, fallback: ReplyStyle) -> ReplyStyle:
    """Map a model-supplied style label onto ReplyStyle, tolerating aliases."""
    if not isinstance(raw, str):
        return fallback
    label = raw.strip()
    if not label:
        return fallback
    lower = label.lower()
    if lower in ALLOWED_STYLES:
        return ReplyStyle(lower)
    if lower in _EN_ALIASES:
        return _EN_ALIASES[lower]
    for needles, style in _ZH_ALIASES:
        if any(n in label for n in needles):
            return style
    return fallback


def extract_json_block(text: str, max_scan_chars: int = DEFAULT_MAX_JSON_SCAN_CHARS) -> Optional[str]:
    """Return the first bracket-balanced JSON array or object in *text*.

    Brackets inside string literals are ignored. The scan from each opening
    bracket is capped at *max_scan_chars* to bound work on huge responses.
    """
    if not isinstance(text, str) or not text or max_scan_chars <= 0:
        return None

    starts = sorted(
        (pos, open_ch, close_ch)
        for pos, open_ch, close_ch in (
            (text.find("["), "[", "]"),
            (text.find("{"), "{", "}"),
        )
        if pos != -1
    )
    for start, open_ch, close_ch in starts:
        depth = 0
        quote: Optional[str] = None
        escaped = False
        end = min(len(text), start + max_scan_chars)
        for i in range(start, end):
            ch = text[i]
            if escaped:
                escaped = False
                continue
            if quote is not None:
                if ch == "\\":
                    escaped = True
                elif ch == quote:
                    quote = None
                continue
            if ch in ('"', "'"):
                quote = ch
            elif ch == open_ch:
                depth += 1
            elif ch == close_ch:
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
    return None


def validate_reply_candidates(items: Any) -> ValidationResult:
    errors: List[str] = []
    if not isinstance(items, list):
        return ValidationResult(ok=False, errors=["candidates must be an array"])
    if not items:
        errors.append("candidates must not be empty")

    for i, c in enumerate(items):
        if isinstance(c, ReplyCandidate):
            style, text = c.style, c.text
        elif isinstance(c, dict):
            style, text = c.get("style"), c.get("text")
        else:
            errors.append(f"candidates[{i}] must be an object")
            continue
        if not isinstance(style, str) or not style.strip():
            errors.append(f"candidates[{i}].style must be a non-empty string")
        elif style.strip().lower() not in ALLOWED_STYLES:
            errors.append(
                f"candidates[{i}].style must be one of: {', '.join(s.value for s in ReplyStyle)}"
            )
        if not isinstance(text, str) or not text.strip():
            errors.append(f"candidates[{i}].text must be a non-empty string")

    return ValidationResult(ok=not errors, errors=errors)


def _parse_array(content: str) -> List[Any]:
    try:
        direct = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        direct = None
    if isinstance(direct, list):
        return direct

    block = extract_json_block(content)
    if block is None:
        raise OutputParseError("No JSON array found in LLM response")
    try:
        parsed = json.loads(block)
    except json.JSONDecodeError as exc:
        raise OutputParseError(f"Malformed JSON in LLM response: {exc.msg}", cause=exc) from exc
    if not isinstance(parsed, list):
        raise OutputParseError("Top-level JSON is not an array")
    return parsed


def parse_reply_content(
    content: str,
    styles: Sequence[ReplyStyle],
    task: Optional[LLMTask] = None,
) -> List[ReplyCandidate]:
    """Turn raw model text into validated candidates, or raise OutputParseError."""
    effective_task = task or LLMTask.REPLY
    first_style = styles[0] if styles else ReplyStyle.RATIONAL

    if effective_task in (LLMTask.PROFILE_EXTRACTION, LLMTask.MEMORY_EXTRACTION):
        # Extraction payloads are consumed downstream as a JSON object string
        block = extract_json_block(content) or (content or "").strip()
        return [ReplyCandidate(text=block, style=first_style, confidence=DEFAULT_CONFIDENCE)]

    parsed = _parse_array(content)

    candidates: List[ReplyCandidate] = []
    for idx, item in enumerate(parsed):
        fallback = styles[idx] if idx < len(styles) else (styles[0] if styles else ReplyStyle.CASUAL)
        if isinstance(item, str):
            # Some models return a bare string array
            candidates.append(ReplyCandidate(text=item, style=fallback, confidence=DEFAULT_CONFIDENCE))
            continue
        if not isinstance(item, dict):
            raise OutputParseError(f"candidates[{idx}] must be an object or string")
        text = item.get("text")
        if not isinstance(text, str):
            raise OutputParseError(f"candidates[{idx}].text must be a string")
        candidates.append(ReplyCandidate(
            text=text,
            style=normalize_reply_style(item.get("style"), fallback),
            confidence=DEFAULT_CONFIDENCE,
        ))

    result = validate_reply_candidates(candidates)
    if not result.ok:
        logger.debug("parse_reply_content: rejected candidates: %s", result.errors)
        raise OutputParseError(
            f"Invalid reply candidates: {'; '.join(result.errors)}",
            details={"errors": result.errors},
        )
    return candidates
