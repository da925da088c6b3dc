"""
Built-in exception types for configuration, backends and the failover chain.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from social_copilot.core.exceptions.base import CopilotError, ErrorKind


class ConfigurationError(CopilotError):
    """Invalid or missing configuration (unknown provider, bad cache size...)."""

    default_code = "CONFIGURATION_ERROR"
    kind = ErrorKind.CONFIGURATION


class BackendError(CopilotError):
    """A backend call failed: network, non-2xx status or timeout."""

    default_code = "BACKEND_ERROR"
    kind = ErrorKind.BACKEND

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ) -> None:
        details = dict(kwargs.pop("details", None) or {})
        if provider is not None:
            details.setdefault("provider", provider)
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(message, details=details, **kwargs)
        self.provider = provider
        self.status_code = status_code


class OutputParseError(CopilotError):
    """Backend returned syntactically or semantically invalid reply content."""

    default_code = "OUTPUT_PARSE_ERROR"
    kind = ErrorKind.OUTPUT_PARSE


class CooldownError(CopilotError):
    """Synthetic failure recorded when the primary is skipped during cooldown."""

    default_code = "PRIMARY_COOLDOWN"
    kind = ErrorKind.COOLDOWN

    def __init__(self, provider: str, cooldown_seconds: float) -> None:
        super().__init__(
            f"Primary provider {provider!r} in cooldown for {cooldown_seconds:g}s",
            details={"provider": provider, "cooldown_seconds": cooldown_seconds},
        )
        self.provider = provider
        self.cooldown_seconds = cooldown_seconds


class AllProvidersFailedError(CopilotError):
    """Every configured backend attempt failed for one request."""

    default_code = "ALL_PROVIDERS_FAILED"
    kind = ErrorKind.ALL_FAILED

    def __init__(self, attempts: Sequence[Tuple[str, BaseException]]) -> None:
        self.attempts: List[Tuple[str, BaseException]] = list(attempts)
        summary = "; ".join(f"{name}: {_describe(err)}" for name, err in self.attempts)
        super().__init__(
            f"All LLM providers failed: {summary}",
            details={"providers": [name for name, _ in self.attempts]},
            cause=self.attempts[-1][1] if self.attempts else None,
        )

    @property
    def errors(self) -> List[BaseException]:
        return [err for _, err in self.attempts]


def _describe(err: BaseException) -> str:
    text = str(err)
    return text if text else err.__class__.__name__
