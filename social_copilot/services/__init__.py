"""Service layer: composition of the reply orchestrator."""
from social_copilot.services.reply_service import (
    build_orchestrator,
    check_connections,
    configure_default,
    get_default,
    reset_default,
)

__all__ = [
    "build_orchestrator",
    "check_connections",
    "configure_default",
    "get_default",
    "reset_default",
]
