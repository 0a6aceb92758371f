"""SecurityGate — session lifecycle, input validation and guarded execution.

Every outbound call that carries contract text goes through
``secure_execute``:

    gate = SecurityGate()
    gate.init_session()

    async def ask_model(safe_text: str) -> str:
        ...                                  # only ever sees redacted text

    answer = await gate.secure_execute(raw_text, "risk-analysis", ask_model)

    gate.clear_session()                     # later calls are refused

Module-level functions at the bottom drive one process-wide gate for
callers that don't thread an instance through.
"""

from __future__ import annotations
import inspect
import secrets
import threading
import time
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from .errors import ErrorKind, InputTooLarge, NoActiveSession
from .redactor import PatternRedactor, Redactor
from .types import RedactionResult, Session

logger = structlog.get_logger(__name__)

MAX_INPUT_CHARS = 100_000

T = TypeVar("T")


def _short(session_id: str | None) -> str | None:
    return session_id[:6] if session_id else None


class SecurityGate:
    """Single-slot session plus the validate → redact → invoke sequence."""

    def __init__(
        self,
        redactor: Redactor | None = None,
        *,
        max_input_chars: int = MAX_INPUT_CHARS,
    ) -> None:
        self.redactor = redactor or PatternRedactor()
        self.max_input_chars = max_input_chars
        self._session = Session()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def init_session(self) -> str:
        """Start a new session, replacing any live one."""
        session_id = secrets.token_hex(16)
        with self._lock:
            self._session = Session(
                id=session_id,
                is_active=True,
                start_time=time.monotonic(),
            )
        logger.info("session_initialized", session=_short(session_id))
        return session_id

    def get_session_id(self) -> str | None:
        return self._session.id

    def clear_session(self) -> None:
        """End the current session.  Safe to call when none is active."""
        with self._lock:
            old = self._session
            self._session = Session()
        if old.is_active:
            logger.info(
                "session_destroyed",
                session=_short(old.id),
                duration=round(time.monotonic() - old.start_time, 3),
            )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session.is_active

    # ------------------------------------------------------------------
    # Validation / redaction
    # ------------------------------------------------------------------

    def validate_input(self, text: str) -> bool:
        """False when text is longer than ``max_input_chars``."""
        if len(text) > self.max_input_chars:
            logger.warning("input_rejected", length=len(text), limit=self.max_input_chars)
            return False
        return True

    def redact_pii(self, text: str) -> str:
        return self.redactor.apply(text)

    # ------------------------------------------------------------------
    # Guarded execution
    # ------------------------------------------------------------------

    async def secure_execute(
        self,
        text: str,
        task_label: str,
        task: Callable[[str], Awaitable[T]],
    ) -> T:
        """Validate and redact text, then await ``task`` on the redacted copy.

        Raises NoActiveSession or InputTooLarge before anything runs;
        exceptions from the task itself propagate unchanged.
        """
        session, redacted = self._admit(text, task_label)
        try:
            outcome: Any = task(redacted.text)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as exc:
            self._log_failure(task_label, session, exc)
            raise
        return outcome

    def secure_execute_sync(
        self,
        text: str,
        task_label: str,
        task: Callable[[str], T],
    ) -> T:
        """Blocking counterpart of ``secure_execute`` for plain callables."""
        session, redacted = self._admit(text, task_label)
        try:
            return task(redacted.text)
        except Exception as exc:
            self._log_failure(task_label, session, exc)
            raise

    def _admit(self, text: str, task_label: str) -> tuple[Session, RedactionResult]:
        """Steps 1-3 of a guarded call; returns the session snapshot it is bound to."""
        session = self._session
        if not session.is_active or session.id is None:
            logger.warning("gate_rejected", task=task_label, reason=ErrorKind.NO_ACTIVE_SESSION.value)
            raise NoActiveSession()

        if not self.validate_input(text):
            logger.warning("gate_rejected", task=task_label, reason=ErrorKind.INPUT_TOO_LARGE.value)
            raise InputTooLarge(len(text), self.max_input_chars)

        redacted = self.redactor.redact(text)

        # Cleared or replaced while redacting: the call belongs to a dead session
        if self._session is not session:
            logger.warning(
                "gate_rejected",
                task=task_label,
                reason=ErrorKind.NO_ACTIVE_SESSION.value,
                session=_short(session.id),
            )
            raise NoActiveSession("session ended before execution")

        logger.info(
            "gate_execute",
            task=task_label,
            session=_short(session.id),
            redactor=self.redactor.name,
            redacted_length=len(redacted.text),
            categories=redacted.categories,
        )
        return session, redacted

    @staticmethod
    def _log_failure(task_label: str, session: Session, exc: Exception) -> None:
        logger.error(
            "gate_task_failed",
            task=task_label,
            session=_short(session.id),
            error_type=type(exc).__name__,
            error=str(exc),
        )


# ----------------------------------------------------------------------
# Process-wide default gate
# ----------------------------------------------------------------------

_default_gate = SecurityGate()


def get_default_gate() -> SecurityGate:
    return _default_gate


def init_session() -> str:
    return _default_gate.init_session()


def get_session_id() -> str | None:
    return _default_gate.get_session_id()


def clear_session() -> None:
    _default_gate.clear_session()


def validate_input(text: str) -> bool:
    return _default_gate.validate_input(text)


async def secure_execute(
    text: str,
    task_label: str,
    task: Callable[[str], Awaitable[T]],
) -> T:
    return await _default_gate.secure_execute(text, task_label, task)


def secure_execute_sync(text: str, task_label: str, task: Callable[[str], T]) -> T:
    return _default_gate.secure_execute_sync(text, task_label, task)
