"""YAML/dict config loader for redaction-gate.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    redaction_gate:
      max_input_chars: 100000
      redactor: pattern          # "pattern" or "presidio"
      language: en
      score_threshold: 0.35
      entities:                  # presidio only
        - PERSON
        - LOCATION
      logging:
        level: INFO
        format: console          # "console" or "json"
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .gate import MAX_INPUT_CHARS, SecurityGate
from .log import LOG_FORMATS
from .redactor import PatternRedactor, Redactor

REDACTORS = ("pattern", "presidio")


@dataclass
class GateConfig:
    """Configuration for a SecurityGate."""
    max_input_chars: int = MAX_INPUT_CHARS
    redactor: str = "pattern"
    language: str = "en"
    score_threshold: float = 0.35
    entities: list[str] | None = None   # None = presidio defaults
    log_level: str = "INFO"
    log_format: str = "console"


def load_config(data: dict[str, Any] | None) -> GateConfig:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "redaction_gate" key or flat
    if "redaction_gate" in data:
        data = data["redaction_gate"] or {}

    logging_cfg = data.get("logging", {}) or {}
    cfg = GateConfig(
        max_input_chars=data.get("max_input_chars", MAX_INPUT_CHARS),
        redactor=data.get("redactor", "pattern"),
        language=data.get("language", "en"),
        score_threshold=float(data.get("score_threshold", 0.35)),
        entities=data.get("entities"),
        log_level=logging_cfg.get("level", "INFO"),
        log_format=logging_cfg.get("format", "console"),
    )
    _check(cfg)
    return cfg


def load_from_yaml(path: str | Path) -> GateConfig:
    """Load config from a YAML file."""
    with open(Path(path).expanduser()) as f:
        return load_config(yaml.safe_load(f))


def _check(cfg: GateConfig) -> None:
    if isinstance(cfg.max_input_chars, bool) or not isinstance(cfg.max_input_chars, int):
        raise ValueError(f"max_input_chars must be an integer, got {cfg.max_input_chars!r}")
    if cfg.max_input_chars <= 0:
        raise ValueError(f"max_input_chars must be positive, got {cfg.max_input_chars}")
    if cfg.redactor not in REDACTORS:
        raise ValueError(f"Unknown redactor: {cfg.redactor} (expected one of {REDACTORS})")
    if cfg.log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {cfg.log_format} (expected one of {LOG_FORMATS})")


def build_redactor(cfg: GateConfig) -> Redactor:
    if cfg.redactor == "presidio":
        from .presidio_layer import PresidioRedactor
        return PresidioRedactor(
            language=cfg.language,
            entities=cfg.entities,
            score_threshold=cfg.score_threshold,
        )
    return PatternRedactor()


def create_gate(config: GateConfig | dict[str, Any] | None = None) -> SecurityGate:
    """Create a fully configured gate (no session is started)."""
    cfg = config if isinstance(config, GateConfig) else load_config(config)
    _check(cfg)
    return SecurityGate(build_redactor(cfg), max_input_chars=cfg.max_input_chars)
