"""LLM provider implementations. Registered on default_registry by clients.llm.registry."""
from social_copilot.clients.llm.providers.claude import ClaudeLLMClient, claude_builder
from social_copilot.clients.llm.providers.deepseek import DeepSeekLLMClient, deepseek_builder
from social_copilot.clients.llm.providers.gemini import GeminiLLMClient, gemini_builder
from social_copilot.clients.llm.providers.openai import OpenAILLMClient, openai_builder

__all__ = [
    "ClaudeLLMClient",
    "DeepSeekLLMClient",
    "GeminiLLMClient",
    "OpenAILLMClient",
    "claude_builder",
    "deepseek_builder",
    "gemini_builder",
    "openai_builder",
]
