"""Core types."""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EntityMatch:
    """A single detected PII span."""
    category: str          # e.g. "EMAIL", "PHONE", "PERSON"
    start: int             # offsets into the working copy at the pass that found it
    end: int
    text: str
    source: str = "pattern"  # "pattern" | "presidio"
    score: float = 1.0


@dataclass(slots=True)
class RedactionResult:
    """Result of redacting a piece of text."""
    text: str                                   # redacted text with placeholders
    entities: list[EntityMatch] = field(default_factory=list)

    @property
    def categories(self) -> dict[str, int]:
        """Match counts per category (safe to log)."""
        return dict(Counter(e.category for e in self.entities))


@dataclass(frozen=True, slots=True)
class Session:
    """One ephemeral period of authorized use."""
    id: str | None = None
    is_active: bool = False
    start_time: float = 0.0     # monotonic, informational only
