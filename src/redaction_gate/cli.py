"""CLI interface for redaction-gate.

Usage:
    # Redact text (stdin → stdout), inside a one-shot session
    echo 'Mail jane@example.com' | redaction-gate redact

    # Redact a contract file (PDF or text), with category counts as JSON
    redaction-gate redact --file contract.pdf --json

    # Show which spans would be redacted (offsets only, no values)
    redaction-gate detect < contract.txt

    # Check the size limit (exit status 1 when too large)
    redaction-gate validate < contract.txt

    # Wrap raw TTS PCM in a WAV container
    redaction-gate wav --input speech.pcm --output speech.wav

    # Run the HTTP sidecar
    redaction-gate serve --port 18792
"""

from __future__ import annotations
import argparse
import json
import os
import sys
from pathlib import Path

import structlog

from .audio import DEFAULT_SAMPLE_RATE, pcm_to_wav
from .config import REDACTORS, GateConfig, build_redactor, create_gate, load_config, load_from_yaml
from .errors import SecurityError
from .loader import parse_contract
from .log import LOG_FORMATS, configure_logging
from .server import DEFAULT_PORT, serve

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG = os.environ.get("REDACTION_GATE_CONFIG", "")


def _build_config(args: argparse.Namespace) -> GateConfig:
    config = load_from_yaml(args.config) if args.config else load_config({})
    if args.max_input_chars is not None:
        config.max_input_chars = args.max_input_chars
    if args.redactor:
        config.redactor = args.redactor
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format
    return config


def _read_input(args: argparse.Namespace) -> str:
    if getattr(args, "file", None):
        return parse_contract(Path(args.file))
    return sys.stdin.read()


def cmd_redact(args: argparse.Namespace, config: GateConfig) -> int:
    """Redact PII from stdin or a file through a one-shot session."""
    gate = create_gate(config)
    text = _read_input(args)

    gate.init_session()
    try:
        safe = gate.secure_execute_sync(text, "cli-redact", lambda s: s)
    finally:
        gate.clear_session()

    if args.json:
        json.dump({"text": safe, "length": len(safe)}, sys.stdout, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        sys.stdout.write(safe)
    return 0


def cmd_detect(args: argparse.Namespace, config: GateConfig) -> int:
    """List detected spans as JSON (category and offsets, never the values)."""
    redactor = build_redactor(config)
    result = redactor.redact(_read_input(args))
    output = {
        "entities": [
            {"category": e.category, "start": e.start, "end": e.end, "source": e.source}
            for e in result.entities
        ],
        "categories": result.categories,
    }
    json.dump(output, sys.stdout)
    sys.stdout.write("\n")
    return 0


def cmd_validate(args: argparse.Namespace, config: GateConfig) -> int:
    """Check input against the size limit."""
    gate = create_gate(config)
    text = _read_input(args)
    valid = gate.validate_input(text)
    json.dump({"valid": valid, "length": len(text), "limit": gate.max_input_chars}, sys.stdout)
    sys.stdout.write("\n")
    return 0 if valid else 1


def cmd_wav(args: argparse.Namespace, config: GateConfig) -> int:
    """Convert a raw PCM file to WAV."""
    pcm = Path(args.input).read_bytes()
    wav = pcm_to_wav(pcm, sample_rate=args.sample_rate, channels=args.channels)
    Path(args.output).write_bytes(wav)
    logger.info("wav_written", output=args.output, bytes=len(wav))
    return 0


def cmd_serve(args: argparse.Namespace, config: GateConfig) -> int:
    """Run the HTTP sidecar until interrupted."""
    serve(port=args.port, config=config, host=args.host)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redaction-gate",
        description="PII redaction gate for LLM-bound contract text",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config file")
    parser.add_argument("--max-input-chars", type=int, default=None, help="Input size limit")
    parser.add_argument("--redactor", choices=REDACTORS, default=None, help="Redaction strategy")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, ...)")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default=None, help="Log renderer")

    sub = parser.add_subparsers(dest="command", required=True)

    redact = sub.add_parser("redact", help="Redact text (stdin or --file)")
    redact.add_argument("--file", help="Contract file (.pdf or text)")
    redact.add_argument("--json", action="store_true", help="Emit JSON instead of plain text")

    detect = sub.add_parser("detect", help="List PII spans as JSON")
    detect.add_argument("--file", help="Contract file (.pdf or text)")

    validate = sub.add_parser("validate", help="Check the input size limit")
    validate.add_argument("--file", help="Contract file (.pdf or text)")

    wav = sub.add_parser("wav", help="Convert raw PCM to WAV")
    wav.add_argument("--input", required=True, help="Raw PCM file")
    wav.add_argument("--output", required=True, help="WAV file to write")
    wav.add_argument("--sample-rate", type=int, default=DEFAULT_SAMPLE_RATE)
    wav.add_argument("--channels", type=int, default=1)

    serve_p = sub.add_parser("serve", help="Run the HTTP sidecar")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=DEFAULT_PORT)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    cmds = {
        "redact": cmd_redact,
        "detect": cmd_detect,
        "validate": cmd_validate,
        "wav": cmd_wav,
        "serve": cmd_serve,
    }
    try:
        config = _build_config(args)
        configure_logging(config.log_level, config.log_format)
        return cmds[args.command](args, config)
    except SecurityError as e:
        sys.stderr.write(f"{e}\n")
        return 2
    except ValueError as e:
        sys.stderr.write(f"Configuration error: {e}\n")
        return 2


if __name__ == "__main__":
    sys.exit(main())
