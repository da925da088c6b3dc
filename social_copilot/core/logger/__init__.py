"""
Project logger: rotating file (JSON) + console, secrets redacted.

Usage:
    from social_copilot.core.logger import get_logger, configure, LoggerConfig

    # Configure once at startup (optional; from_env() if not called)
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/copilot"))

    # Or from env: LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT, ...
    configure()

    logger = get_logger(__name__)
    logger.info("Started")
"""
from social_copilot.core.logger.config import LoggerConfig
from social_copilot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from social_copilot.core.logger.setup import (
    build_console_handler,
    build_rotating_file_handler,
    configure,
    get_logger,
)

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
    "build_rotating_file_handler",
    "build_console_handler",
]
