"""Best-effort redaction of API-key-like tokens from error messages and logs.

Only common key prefixes are targeted; this keeps keys out of diagnostics,
it is not a general DLP filter.
"""
from __future__ import annotations

import re
from typing import List, Tuple

_REDACTIONS: List[Tuple[re.Pattern[str], str]] = [
    # Anthropic keys: sk-ant-...
    (re.compile(r"\bsk-ant-[A-Za-z0-9_-]{10,}"), "sk-ant-***REDACTED***"),
    # OpenAI / DeepSeek and other "sk-..." keys
    (re.compile(r"\bsk-[A-Za-z0-9_-]{10,}"), "sk-***REDACTED***"),
]


def redact_secrets(text: object) -> str:
    if not isinstance(text, str):
        return ""
    out = text
    for pattern, replacement in _REDACTIONS:
        out = pattern.sub(replacement, out)
    return out
