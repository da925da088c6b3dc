"""
social_copilot.config.orchestrator – backend, cache and failover settings.

Env vars: COPILOT_PRIMARY_PROVIDER, COPILOT_PRIMARY_API_KEY, COPILOT_PRIMARY_MODEL,
COPILOT_PRIMARY_BASE_URL, the same four with FALLBACK, COPILOT_CACHE_ENABLED,
COPILOT_CACHE_SIZE, COPILOT_CACHE_TTL_SECONDS, COPILOT_COOLDOWN_SECONDS.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from social_copilot.core.exceptions import ConfigurationError
from social_copilot.schemas.settings import (
    OrchestratorSettingsSchema,
    ProviderSettingsSchema,
)

_TRUE_VALUES = ("1", "true", "yes")


def _validate_positive(value: float, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")


@dataclass(frozen=True)
class ProviderSettings:
    """Connection settings for one backend."""

    provider: str
    """Registry key: deepseek, openai, claude, gemini (or any custom-registered kind)."""

    api_key: str

    model: Optional[str] = None
    """None = the provider's default model."""

    base_url: Optional[str] = None

    temperature: float = 0.8

    timeout_seconds: float = 20.0
    """Deadline for a single backend call."""

    def __post_init__(self) -> None:
        if not self.provider or not self.provider.strip():
            raise ConfigurationError("provider must be a non-empty string")
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                f"api_key is required for provider {self.provider!r}",
                details={"provider": self.provider},
            )
        _validate_positive(self.timeout_seconds, "timeout_seconds")

    def to_client_config(self) -> Dict[str, Any]:
        """Config dict for LLMRegistry.build()."""
        config: Dict[str, Any] = {
            "api_key": self.api_key,
            "temperature": self.temperature,
            "timeout": self.timeout_seconds,
        }
        if self.model:
            config["model"] = self.model
        if self.base_url:
            config["base_url"] = self.base_url
        return config

    @classmethod
    def from_schema(cls, schema: ProviderSettingsSchema) -> "ProviderSettings":
        return cls(
            provider=schema.provider,
            api_key=schema.api_key or "",
            model=schema.model,
            base_url=schema.base_url,
            temperature=schema.temperature,
            timeout_seconds=schema.timeout_seconds,
        )


@dataclass(frozen=True)
class CacheSettings:
    enabled: bool = True

    size: int = 100
    """LRU capacity (entries)."""

    ttl_seconds: float = 300.0
    """Entries older than this are treated as absent."""

    def __post_init__(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 1:
            raise ConfigurationError(f"cache size must be an integer >= 1, got {self.size!r}")
        _validate_positive(self.ttl_seconds, "cache ttl_seconds")


@dataclass(frozen=True)
class OrchestratorSettings:
    """Everything the Orchestrator needs: backends, cache and cooldown policy."""

    primary: ProviderSettings
    fallback: Optional[ProviderSettings] = None
    cache: CacheSettings = field(default_factory=CacheSettings)
    cooldown_seconds: float = 15.0
    """How long the primary is skipped after repeated failures."""

    def __post_init__(self) -> None:
        _validate_positive(self.cooldown_seconds, "cooldown_seconds")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "OrchestratorSettings":
        """Validate an external settings payload. Raises ConfigurationError."""
        if not data:
            raise ConfigurationError("orchestrator settings are required (missing 'primary')")
        try:
            schema = OrchestratorSettingsSchema.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid orchestrator settings: {exc.error_count()} error(s)",
                # Inputs may hold API keys; keep only locations and messages
                details={"errors": exc.errors(include_url=False, include_input=False)},
                cause=exc,
            ) from exc

        fallback: Optional[ProviderSettings] = None
        # A fallback without a key means "no fallback", not an error
        if schema.fallback is not None and schema.fallback.api_key:
            fallback = ProviderSettings.from_schema(schema.fallback)

        return cls(
            primary=ProviderSettings.from_schema(schema.primary),
            fallback=fallback,
            cache=CacheSettings(
                enabled=schema.cache.enabled,
                size=schema.cache.size,
                ttl_seconds=schema.cache.ttl_seconds,
            ),
            cooldown_seconds=schema.cooldown_seconds,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OrchestratorSettings":
        env = os.environ if environ is None else environ

        def provider_block(prefix: str) -> Optional[Dict[str, Any]]:
            kind = env.get(f"COPILOT_{prefix}_PROVIDER")
            if not kind:
                return None
            return {
                "provider": kind,
                "api_key": env.get(f"COPILOT_{prefix}_API_KEY"),
                "model": env.get(f"COPILOT_{prefix}_MODEL"),
                "base_url": env.get(f"COPILOT_{prefix}_BASE_URL"),
            }

        data: Dict[str, Any] = {
            "primary": provider_block("PRIMARY") or {
                "provider": "deepseek",
                "api_key": env.get("COPILOT_PRIMARY_API_KEY"),
            },
            "fallback": provider_block("FALLBACK"),
            "cache": {
                "enabled": env.get("COPILOT_CACHE_ENABLED", "true").lower() in _TRUE_VALUES,
                "size": env.get("COPILOT_CACHE_SIZE", "100"),
                "ttl_seconds": env.get("COPILOT_CACHE_TTL_SECONDS", "300"),
            },
            "cooldown_seconds": env.get("COPILOT_COOLDOWN_SECONDS", "15"),
        }
        return cls.from_dict(data)
