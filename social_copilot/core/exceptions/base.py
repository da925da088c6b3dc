"""
Base exception types for the reply pipeline.

Every project error carries a machine-readable ``code`` and an explicit
``kind`` (see ErrorKind). Control flow that depends on the failure type
(retry on malformed output, failover on backend errors) dispatches on
``error_kind(exc)`` instead of exception class identity.
"""
from __future__ import annotations

import traceback
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Classification of failures that cross the orchestration layer."""
    CONFIGURATION = "configuration"
    BACKEND = "backend"
    OUTPUT_PARSE = "output_parse"
    COOLDOWN = "cooldown"
    ALL_FAILED = "all_failed"


class CopilotError(Exception):
    """
    Base exception for all project errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable slug (defaults to the class default_code).
        kind: ErrorKind used by callers to branch on the failure type.
        details: Optional dict for extra context (e.g. provider name).
        cause: Optional chained exception.
    """

    default_code: str = "ERROR"
    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else getattr(
            self.__class__, "default_code", self.__class__.__name__
        )
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, code={self.code!r}, kind={self.kind!r})"
        )

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging or diagnostics."""
        out: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "kind": self.kind.value if self.kind is not None else None,
        }
        if self.details:
            out["details"] = self.details
        if self.cause is not None:
            out["cause"] = str(self.cause)
            out["cause_traceback"] = traceback.format_exception(
                type(self.cause), self.cause, self.cause.__traceback__
            )
        return out


def error_kind(exc: BaseException) -> Optional[ErrorKind]:
    """Return the ErrorKind tag of *exc*, or None for foreign exceptions."""
    kind = getattr(exc, "kind", None)
    return kind if isinstance(kind, ErrorKind) else None
