"""
Logger configuration. Build it in code or load it from env.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

_TRUE_VALUES = ("1", "true", "yes")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for the project logger.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    # Level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    level: str = "INFO"
    # Log directory for rotating file (if None, file handler is skipped)
    log_dir: Optional[str] = None
    # Basename for log file (e.g. "copilot" -> copilot.log)
    log_file_basename: str = "copilot"
    max_bytes: int = 5 * 1024 * 1024  # 5 MB
    backup_count: int = 5
    # Logger that receives the handlers; package modules log under it
    root_name: str = "social_copilot"
    console: bool = True
    # Only effective when log_dir is set
    file_rotating: bool = True
    # Replace API-key-like tokens in every record
    redact: bool = True

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """Build config from LOG_* environment variables."""
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "copilot"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", "5242880")),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            root_name=os.environ.get("LOG_ROOT_NAME") or "social_copilot",
            console=os.environ.get("LOG_CONSOLE", "true").lower() in _TRUE_VALUES,
            file_rotating=os.environ.get("LOG_FILE_ROTATING", "true").lower() in _TRUE_VALUES,
            redact=os.environ.get("LOG_REDACT", "true").lower() in _TRUE_VALUES,
        )

    def with_overrides(self, **overrides: object) -> "LoggerConfig":
        """Return a new config with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
