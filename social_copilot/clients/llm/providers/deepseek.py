"""DeepSeek LLM provider: OpenAI-compatible API on DeepSeek's endpoint."""
from __future__ import annotations

from typing import Any, Dict

from social_copilot.clients.llm.providers.openai import OpenAILLMClient


class DeepSeekLLMClient(OpenAILLMClient):
    provider_name = "deepseek"
    default_model = "deepseek-chat"
    default_base_url = "https://api.deepseek.com"
    api_key_env = "DEEPSEEK_API_KEY"


def deepseek_builder(config: Dict[str, Any]) -> DeepSeekLLMClient:
    return DeepSeekLLMClient(
        model=config.get("model"),
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),
        temperature=float(config.get("temperature", 0.8)),
        timeout=config.get("timeout"),
    )
