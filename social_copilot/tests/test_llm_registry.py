"""Unit tests for the LLM provider registry and client construction."""
from __future__ import annotations

import unittest

from social_copilot.clients.llm import LLMRegistry, default_registry, normalize_base_url
from social_copilot.clients.llm.providers import (
    ClaudeLLMClient,
    DeepSeekLLMClient,
    GeminiLLMClient,
    OpenAILLMClient,
)
from social_copilot.core.exceptions import ConfigurationError


class TestNormalizeBaseUrl(unittest.TestCase):
    def test_strips_suffixes(self) -> None:
        self.assertEqual(normalize_base_url("https://api.example.com/"), "https://api.example.com")
        self.assertEqual(normalize_base_url("https://api.example.com/v1"), "https://api.example.com")
        self.assertEqual(
            normalize_base_url("https://api.example.com/v1/chat/completions"),
            "https://api.example.com",
        )

    def test_blank(self) -> None:
        self.assertIsNone(normalize_base_url(None))
        self.assertIsNone(normalize_base_url("   "))


class TestLLMRegistry(unittest.TestCase):
    def test_default_registry_has_all_providers(self) -> None:
        self.assertEqual(default_registry.names, ["claude", "deepseek", "gemini", "openai"])
        self.assertIn("deepseek", default_registry)

    def test_unknown_provider(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            default_registry.build("mistral", {"api_key": "k"})
        self.assertEqual(ctx.exception.details["provider"], "mistral")

    def test_custom_registry_is_isolated(self) -> None:
        registry = LLMRegistry()
        self.assertEqual(registry.names, [])
        registry.register("x", lambda cfg: ClaudeLLMClient(api_key="k"))
        self.assertIsNotNone(registry.get("x"))
        self.assertNotIn("x", default_registry)

    def test_build_deepseek_defaults(self) -> None:
        client = default_registry.build("deepseek", {"api_key": "sk-test-0000000000"})
        self.assertIsInstance(client, DeepSeekLLMClient)
        self.assertEqual(client.provider, "deepseek")
        self.assertEqual(client.model, "deepseek-chat")

    def test_build_openai_with_model(self) -> None:
        client = default_registry.build("openai", {"api_key": "k", "model": "gpt-4o", "timeout": 5})
        self.assertIsInstance(client, OpenAILLMClient)
        self.assertEqual(client.provider, "openai")
        self.assertEqual(client.model, "gpt-4o")

    def test_build_claude_and_gemini(self) -> None:
        claude = default_registry.build("claude", {"api_key": "k"})
        self.assertIsInstance(claude, ClaudeLLMClient)
        self.assertEqual(claude.model, "claude-sonnet-4-5")
        gemini = default_registry.build("gemini", {"api_key": "k"})
        self.assertIsInstance(gemini, GeminiLLMClient)
        self.assertEqual(gemini.model, "gemini-2.0-flash")
        self.assertEqual(gemini.provider, "gemini")


if __name__ == "__main__":
    unittest.main()
