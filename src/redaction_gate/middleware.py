"""OpenAI-compatible middleware: gates chat-format messages before they
reach a provider.

Usage:

    mw = GateMiddleware.create()           # own gate, live session

    # Before sending to provider
    safe_messages = mw.pre_send(messages)

    # Or let the middleware call the transport itself
    reply = await mw.send(messages, transport)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from .errors import ErrorKind, NoActiveSession
from .gate import MAX_INPUT_CHARS, SecurityGate
from .redactor import Redactor

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _passthrough(safe_text: str) -> str:
    return safe_text


@dataclass
class GateMiddleware:
    """Middleware that sits between client and LLM provider."""

    gate: SecurityGate
    task_label: str = "chat"

    @classmethod
    def create(
        cls,
        *,
        redactor: Redactor | None = None,
        max_input_chars: int = MAX_INPUT_CHARS,
    ) -> "GateMiddleware":
        """Create a middleware with its own gate and a live session."""
        gate = SecurityGate(redactor, max_input_chars=max_input_chars)
        gate.init_session()
        return cls(gate=gate)

    def _check_session(self) -> None:
        if not self.gate.is_active:
            logger.warning("gate_rejected", task=self.task_label, reason=ErrorKind.NO_ACTIVE_SESSION.value)
            raise NoActiveSession()

    def _redact_content(self, content: Any, label: str) -> Any:
        if content is None or content == "":
            return content
        if isinstance(content, str):
            return self.gate.secure_execute_sync(content, label, _passthrough)
        if isinstance(content, list):
            parts: list[Any] = []
            for part in content:
                kind = part.get("type") if isinstance(part, dict) else None
                if kind != "text":
                    raise ValueError(f"Unsupported content part for {label}: {kind!r}")
                text = part.get("text")
                if not isinstance(text, str):
                    raise ValueError(f"Text part without string text for {label}")
                parts.append({**part, "text": self._redact_content(text, label)})
            return parts
        raise ValueError(f"Unsupported content for {label}: {type(content).__name__}")

    def pre_send(
        self,
        messages: list[dict[str, Any]],
        *,
        content_key: str = "content",
    ) -> list[dict[str, Any]]:
        """Redact PII from outbound messages.

        String content and every ``{"type": "text"}`` part pass through the
        gate on their own, so each is subject to the size limit.  Any other
        part type is refused rather than forwarded.  Returns new message
        dicts; the originals are not mutated.
        """
        self._check_session()
        out: list[dict[str, Any]] = []
        for msg in messages:
            if content_key not in msg:
                out.append(msg)
                continue
            label = f"{self.task_label}:{msg.get('role', 'unknown')}"
            out.append({**msg, content_key: self._redact_content(msg[content_key], label)})
        return out

    async def send(
        self,
        messages: list[dict[str, Any]],
        transport: Callable[[list[dict[str, Any]]], Awaitable[T]],
    ) -> T:
        """Redact messages, then hand them to ``transport``.

        The transport call is bound to the session that was live when
        ``send`` was entered.
        """
        session = self.gate.session
        self._check_session()
        safe = self.pre_send(messages)
        if self.gate.session is not session:
            logger.warning("gate_rejected", task=self.task_label, reason=ErrorKind.NO_ACTIVE_SESSION.value)
            raise NoActiveSession("session ended before execution")
        try:
            return await transport(safe)
        except Exception as exc:
            logger.error(
                "transport_failed",
                task=self.task_label,
                messages=len(safe),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "session_active": self.gate.is_active,
            "redactor": self.gate.redactor.name,
            "max_input_chars": self.gate.max_input_chars,
        }
