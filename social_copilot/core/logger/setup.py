"""
Logger setup: attach rotating file (JSON) and console handlers from config.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from social_copilot.core.logger.config import LoggerConfig
from social_copilot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter


# Set by configure(); get_logger() configures from env on first use otherwise
_default_config: Optional[LoggerConfig] = None


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure(config: Optional[LoggerConfig] = None) -> None:
    """
    Configure the package root logger with the given config.
    If config is None, uses LoggerConfig.from_env().
    Call once at application startup (CLI, host process).
    """
    global _default_config
    if config is None:
        config = LoggerConfig.from_env()
    _default_config = config

    root = logging.getLogger(config.root_name or "social_copilot")
    root.setLevel(_level(config.level))

    # Reconfiguration (tests, CLI restarts) must not stack handlers
    root.handlers.clear()

    if config.console:
        root.addHandler(build_console_handler(config.level, redact=config.redact))

    if config.file_rotating and config.log_dir and config.log_dir.strip():
        try:
            handler = build_rotating_file_handler(
                config.log_dir,
                basename=config.log_file_basename,
                max_bytes=config.max_bytes,
                backup_count=config.backup_count,
                level=config.level,
                redact=config.redact,
            )
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)
        else:
            root.addHandler(handler)

    root.propagate = False


def get_logger(name: str, config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Return a logger for the given name. If configure() was never called,
    calls configure(config or from_env()) so that the root has handlers.
    """
    if _default_config is None:
        configure(config)
    return logging.getLogger(name)


def build_rotating_file_handler(
    log_dir: str,
    basename: str = "copilot",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
    level: str = "INFO",
    *,
    redact: bool = True,
) -> RotatingFileHandler:
    """Rotating file handler with the JSON formatter."""
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, f"{basename}.log"),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(_level(level))
    handler.setFormatter(JsonFormatter(redact=redact))
    return handler


def build_console_handler(
    level: str = "INFO",
    fmt: Optional[str] = None,
    *,
    redact: bool = True,
) -> logging.StreamHandler:
    """Console handler with the plain formatter."""
    handler = logging.StreamHandler()
    handler.setLevel(_level(level))
    handler.setFormatter(PlainConsoleFormatter(fmt=fmt, redact=redact))
    return handler
