"""Pydantic schemas for the external orchestrator settings payload.

The payload usually comes from the host's settings storage as camelCase JSON
(``backendKind``, ``apiKey``, ``baseUrl``); snake_case keys are accepted too.
``OrchestratorSettings.from_dict`` validates through these models and then
builds the frozen settings dataclasses.
"""
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ProviderSettingsSchema(BaseModel):
    """One backend: which provider kind, its key, and optional model / endpoint."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    provider: str = Field(
        ...,
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("provider", "backend_kind", "backendKind"),
        description="e.g. deepseek, openai, claude, gemini",
    )
    api_key: Optional[str] = Field(None, validation_alias=AliasChoices("api_key", "apiKey"))
    model: Optional[str] = None
    base_url: Optional[str] = Field(None, validation_alias=AliasChoices("base_url", "baseUrl"))
    temperature: float = Field(0.8, ge=0.0, le=2.0)
    timeout_seconds: float = Field(
        20.0,
        gt=0,
        validation_alias=AliasChoices("timeout_seconds", "timeoutSeconds", "timeout"),
    )

    @field_validator("provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("api_key", "model", "base_url")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class CacheSettingsSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = True
    size: int = Field(100, ge=1)
    ttl_seconds: float = Field(
        300.0,
        gt=0,
        validation_alias=AliasChoices("ttl_seconds", "ttlSeconds", "ttl"),
    )


class OrchestratorSettingsSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    primary: ProviderSettingsSchema
    fallback: Optional[ProviderSettingsSchema] = None
    cache: CacheSettingsSchema = Field(default_factory=CacheSettingsSchema)
    cooldown_seconds: float = Field(
        15.0,
        gt=0,
        validation_alias=AliasChoices("cooldown_seconds", "cooldownSeconds"),
    )
