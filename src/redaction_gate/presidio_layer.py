"""Presidio NER-based redactor for unstructured PII.

Catches names, locations and other entities that the pattern table can't.
Uses spaCy under the hood, so it is only loaded when this strategy is
selected (``redactor: presidio`` in the gate config).

The pattern passes always run first; Presidio then scans the already
redacted text and never touches existing placeholders.
"""

from __future__ import annotations
import re
from typing import TYPE_CHECKING, Any

import structlog

from .patterns import placeholder
from .redactor import PatternRedactor, Redactor
from .types import EntityMatch, RedactionResult

if TYPE_CHECKING:
    from presidio_analyzer import AnalyzerEngine

logger = structlog.get_logger(__name__)

# Lazy singleton: spaCy is loaded on first use
_engine: AnalyzerEngine | None = None
_engine_lang: str = ""

_PLACEHOLDER = re.compile(r"\{REDACTED_[A-Z_]+\}")

# Default entity types to detect (Presidio's full set is much larger)
DEFAULT_ENTITIES = [
    "PERSON",
    "LOCATION",
    "NRP",           # nationality, religious, political group
]


def _get_engine(language: str = "en") -> AnalyzerEngine:
    """Lazy-init the Presidio analyzer engine."""
    global _engine, _engine_lang
    if _engine is None or _engine_lang != language:
        from presidio_analyzer import AnalyzerEngine
        from presidio_analyzer.nlp_engine import NlpEngineProvider

        provider = NlpEngineProvider(nlp_configuration={
            "nlp_engine_name": "spacy",
            "models": [{"lang_code": language, "model_name": f"{language}_core_web_sm"}],
        })
        nlp_engine = provider.create_engine()
        _engine = AnalyzerEngine(nlp_engine=nlp_engine, supported_languages=[language])
        _engine_lang = language
        logger.info("presidio_engine_loaded", language=language)
    return _engine


class PresidioRedactor(Redactor):
    """Pattern passes followed by Presidio NER.

    Args:
        language: ISO language code.
        entities: Entity types to detect (None = DEFAULT_ENTITIES).
        score_threshold: Minimum confidence score.
        engine: Pre-built analyzer; when omitted a shared spaCy-backed
            engine is created on first use.
    """

    name = "presidio"

    def __init__(
        self,
        *,
        language: str = "en",
        entities: list[str] | None = None,
        score_threshold: float = 0.35,
        engine: Any = None,
    ) -> None:
        self.language = language
        self.entities = entities or DEFAULT_ENTITIES
        self.score_threshold = score_threshold
        self._engine = engine
        self._base = PatternRedactor()

    def redact(self, text: str) -> RedactionResult:
        first = self._base.redact(text)
        if not first.text:
            return first

        engine = self._engine or _get_engine(self.language)
        results = engine.analyze(
            text=first.text,
            language=self.language,
            entities=self.entities,
            score_threshold=self.score_threshold,
        )

        exclude = [(m.start(), m.end()) for m in _PLACEHOLDER.finditer(first.text)]
        found: list[EntityMatch] = []
        for r in results:
            # Placeholders from the pattern passes are final
            if any(r.start < e and r.end > s for s, e in exclude):
                continue
            found.append(EntityMatch(
                category=r.entity_type,
                start=r.start,
                end=r.end,
                text=first.text[r.start:r.end],
                source="presidio",
                score=r.score,
            ))
        found = _dedupe(found)

        # Apply right-to-left to preserve offsets
        redacted = first.text
        for match in sorted(found, key=lambda m: m.start, reverse=True):
            redacted = redacted[:match.start] + placeholder(match.category) + redacted[match.end:]

        return RedactionResult(text=redacted, entities=first.entities + found)


def _dedupe(matches: list[EntityMatch]) -> list[EntityMatch]:
    """Remove overlapping matches, keeping highest score."""
    if not matches:
        return matches
    ranked = sorted(matches, key=lambda m: (-m.score, -(m.end - m.start)))
    taken: list[EntityMatch] = []
    used: list[tuple[int, int]] = []
    for m in ranked:
        if not any(m.start < e and m.end > s for s, e in used):
            taken.append(m)
            used.append((m.start, m.end))
    return sorted(taken, key=lambda m: m.start)
