"""
Project exception system.

Usage:
    from social_copilot.core.exceptions import BackendError, ErrorKind, error_kind

    raise BackendError("DeepSeek API error: 503", provider="deepseek", status_code=503)

    # Branch on the failure type without isinstance checks
    if error_kind(exc) is ErrorKind.OUTPUT_PARSE:
        ...
"""
from social_copilot.core.exceptions.base import CopilotError, ErrorKind, error_kind
from social_copilot.core.exceptions.errors import (
    AllProvidersFailedError,
    BackendError,
    ConfigurationError,
    CooldownError,
    OutputParseError,
)

__all__ = [
    "CopilotError",
    "ErrorKind",
    "error_kind",
    "ConfigurationError",
    "BackendError",
    "OutputParseError",
    "CooldownError",
    "AllProvidersFailedError",
]
