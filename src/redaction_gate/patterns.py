"""Pattern table for structured PII.

Five categories, applied in a fixed order.  Each pass rewrites the output
of the previous one, so a span claimed by an earlier category is already a
placeholder by the time later categories run.

Personal names are not detected.  ``presidio_layer`` provides an NER
strategy that can be swapped in where that matters.
"""

from __future__ import annotations
import re

from .types import EntityMatch, RedactionResult

_STREET_TYPES = "Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr|Way"

# Each pattern: (category, compiled_regex).  Order matters.
_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("EMAIL", re.compile(
        r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}",
        re.ASCII,
    )),

    # Optional +1 / 1 prefix, optional (area code), 3-3-4 digit groups
    ("PHONE", re.compile(
        r"(?:\+?1[\-. ]?)?\(?([0-9]{3})\)?[\-. ]?([0-9]{3})[\-. ]?([0-9]{4})",
        re.ASCII,
    )),

    ("SSN", re.compile(
        r"\b\d{3}-\d{2}-\d{4}\b",
        re.ASCII,
    )),

    # 13-16 digits, spaces or hyphens allowed between them
    ("CREDIT_CARD", re.compile(
        r"\b(?:\d[ \-]*?){13,16}\b",
        re.ASCII,
    )),

    # Leading house number, one or more words, then a street type
    ("ADDRESS", re.compile(
        rf"\d+\s[A-Za-z0-9\s]+(?:{_STREET_TYPES})\.?",
        re.ASCII | re.IGNORECASE,
    )),
]

CATEGORIES: tuple[str, ...] = tuple(category for category, _ in _PATTERNS)


def placeholder(category: str) -> str:
    """Replacement token for a category, e.g. ``{REDACTED_EMAIL}``."""
    return "{REDACTED_" + category + "}"


def scan_patterns(text: str) -> RedactionResult:
    """Run every pattern pass over text, recording what each one replaced."""
    if not text:
        return RedactionResult(text="")

    matches: list[EntityMatch] = []
    working = text
    for category, pattern in _PATTERNS:
        token = placeholder(category)

        def _replace(m: re.Match, category: str = category, token: str = token) -> str:
            matches.append(EntityMatch(
                category=category,
                start=m.start(),
                end=m.end(),
                text=m.group(),
            ))
            return token

        working = pattern.sub(_replace, working)

    return RedactionResult(text=working, entities=matches)


def redact_pii(text: str) -> str:
    """Replace every detected PII span with its category placeholder."""
    return scan_patterns(text).text
