"""Redaction Gate — session-scoped PII redaction in front of LLM calls."""

from .types import EntityMatch, RedactionResult, Session
from .errors import ErrorKind, SecurityError, NoActiveSession, InputTooLarge
from .patterns import CATEGORIES, redact_pii, scan_patterns
from .redactor import Redactor, PatternRedactor
from .gate import (
    MAX_INPUT_CHARS, SecurityGate, get_default_gate,
    init_session, get_session_id, clear_session, validate_input,
    secure_execute, secure_execute_sync,
)
from .middleware import GateMiddleware
from .config import GateConfig, create_gate, load_config, load_from_yaml

__all__ = [
    "EntityMatch", "RedactionResult", "Session",
    "ErrorKind", "SecurityError", "NoActiveSession", "InputTooLarge",
    "CATEGORIES", "redact_pii", "scan_patterns",
    "Redactor", "PatternRedactor",
    "MAX_INPUT_CHARS", "SecurityGate", "get_default_gate",
    "init_session", "get_session_id", "clear_session", "validate_input",
    "secure_execute", "secure_execute_sync",
    "GateMiddleware",
    "GateConfig", "create_gate", "load_config", "load_from_yaml",
]
__version__ = "0.1.0"
