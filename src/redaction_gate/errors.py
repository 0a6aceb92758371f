"""Gate error taxonomy.

Failures raised by a wrapped task are never translated; only the two
pre-execution refusals below originate here.
"""

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    NO_ACTIVE_SESSION = "no_active_session"
    INPUT_TOO_LARGE = "input_too_large"


class SecurityError(Exception):
    """Base class for refusals raised by the gate before a task runs."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(f"Security Error: {message}")


class NoActiveSession(SecurityError):
    kind = ErrorKind.NO_ACTIVE_SESSION

    def __init__(self, message: str = "no active session") -> None:
        super().__init__(message)


class InputTooLarge(SecurityError):
    kind = ErrorKind.INPUT_TOO_LARGE

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"input validation failed ({length} chars exceeds limit of {limit})"
        )
