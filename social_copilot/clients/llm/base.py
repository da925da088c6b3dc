from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List, Literal, Optional, TypedDict


class LLMMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class BaseLLMClient(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        ...

    @abstractmethod
    async def complete(self, prompt: str, *, max_tokens: Optional[int] = None) -> str:
        ...

    async def chat(self, messages: List[LLMMessage], *, max_tokens: Optional[int] = None) -> str:
        """Send a conversation with an optional system message.

        Default implementation concatenates all messages into a single prompt
        and calls ``complete()``.  Providers with native system-prompt APIs
        override it.
        """
        parts: List[str] = []
        for msg in messages:
            role = msg.get("role", "user")
            content = (msg.get("content") or "").strip()
            if not content:
                continue
            if role == "system":
                parts.insert(0, f"[System instructions]\n{content}\n")
            else:
                parts.append(f"{role}: {content}")
        return await self.complete("\n".join(parts), max_tokens=max_tokens)

    @abstractmethod
    async def test_connection(self) -> bool:
        ...


_V1_SUFFIX = re.compile(r"/v1(?:/.*)?$", re.IGNORECASE)


def normalize_base_url(url: Optional[str]) -> Optional[str]:
    """Strip trailing slashes and a pasted ``/v1/...`` suffix.

    Users often paste full endpoint URLs; clients append the API path themselves.
    """
    if url is None:
        return None
    base = url.strip().rstrip("/")
    if not base:
        return None
    return _V1_SUFFIX.sub("", base).rstrip("/") or None
