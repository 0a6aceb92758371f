"""Redactor: the pluggable redaction strategy used by the gate.

Usage:
    from redaction_gate import PatternRedactor

    redactor = PatternRedactor()
    result = redactor.redact("Email me at john@acme.com")
    print(result.text)           # "Email me at {REDACTED_EMAIL}"
    print(result.categories)     # {"EMAIL": 1}

Any object with the same ``redact`` / ``detect`` / ``apply`` surface can be
handed to ``SecurityGate``.
"""

from __future__ import annotations

from .patterns import scan_patterns
from .types import EntityMatch, RedactionResult


class Redactor:
    """Base redaction strategy.

    Subclasses implement ``redact``; ``detect`` and ``apply`` are views of
    the same result so the two can never disagree.
    """

    name = "base"

    def redact(self, text: str) -> RedactionResult:
        raise NotImplementedError

    def detect(self, text: str) -> list[EntityMatch]:
        """Return the spans that ``apply`` would replace."""
        return self.redact(text).entities

    def apply(self, text: str) -> str:
        """Return the redacted text."""
        return self.redact(text).text


class PatternRedactor(Redactor):
    """Regex-only redactor over the five structured PII categories."""

    name = "pattern"

    def redact(self, text: str) -> RedactionResult:
        return scan_patterns(text)
