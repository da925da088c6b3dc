"""Request keys: canonical JSON of the input reduced with a djb2 rolling hash.

Keys are for cache lookup and in-flight deduplication only. Collisions are
possible and tolerated; nothing here is a security property.
"""
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Mapping, Union

from social_copilot.replies.types import LLMInput

_MASK_64 = (1 << 64) - 1
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def canonical_json(value: Any) -> str:
    """Serialize with sorted keys at every depth so field order never matters."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def djb2(text: str) -> int:
    h = 5381
    for ch in text:
        h = ((h << 5) + h + ord(ch)) & _MASK_64
    return h


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class CacheKeyEncoder:
    """Pure function object: equal-by-value inputs produce equal keys."""

    def encode(self, input: Union[LLMInput, Mapping[str, Any]]) -> str:
        payload = input.to_dict() if isinstance(input, LLMInput) else input
        return to_base36(djb2(canonical_json(payload)))

    __call__ = encode
