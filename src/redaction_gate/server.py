"""HTTP sidecar server for redaction-gate.

Runs as a lightweight stdlib HTTP server on localhost so a front end in
another process can hold a session and push text through the gate.

Endpoints:
    GET    /health        — Health check
    GET    /session       — Is a session active?
    POST   /session       — Start a session (returns its id)
    DELETE /session       — End the session
    POST   /validate      — Check input size (JSON body {"text": ...})
    POST   /redact-text   — Gated redaction (JSON body {"text": ...})

All endpoints expect/return JSON.  Gate refusals come back as
{"error": ..., "kind": ...} with status 403 (no session) or 413 (too large).
"""

from __future__ import annotations
import json
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

import structlog

from .config import GateConfig, create_gate
from .errors import InputTooLarge, NoActiveSession, SecurityError
from .gate import SecurityGate

logger = structlog.get_logger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = int(os.environ.get("REDACTION_GATE_PORT", "18792"))

# Shared state
_gate: SecurityGate | None = None


def _get_gate() -> SecurityGate:
    global _gate
    if _gate is None:
        _gate = create_gate()
    return _gate


def _status_for(exc: SecurityError) -> int:
    if isinstance(exc, NoActiveSession):
        return 403
    if isinstance(exc, InputTooLarge):
        return 413
    return 400


class GateHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the gate sidecar."""

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        data = json.loads(body) if body else {}
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        return data

    def _read_text(self) -> str:
        text = self._read_json().get("text", "")
        if not isinstance(text, str):
            raise ValueError("'text' must be a string")
        return text

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        # Request lines go through structlog instead
        logger.debug("http_request", client=self.client_address[0], request=format % args)

    def do_GET(self) -> None:
        gate = _get_gate()
        if self.path == "/health":
            self._respond(200, {
                "status": "ok",
                "session_active": gate.is_active,
                "redactor": gate.redactor.name,
            })
        elif self.path == "/session":
            self._respond(200, {"active": gate.is_active})
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        gate = _get_gate()
        try:
            if self.path == "/session":
                self._respond(201, {"session_id": gate.init_session()})

            elif self.path == "/validate":
                text = self._read_text()
                self._respond(200, {
                    "valid": gate.validate_input(text),
                    "length": len(text),
                    "limit": gate.max_input_chars,
                })

            elif self.path == "/redact-text":
                text = self._read_text()
                safe = gate.secure_execute_sync(text, "redact-text", lambda s: s)
                self._respond(200, {"text": safe, "length": len(safe)})

            else:
                self._respond(404, {"error": "not found"})

        except SecurityError as e:
            self._respond(_status_for(e), {"error": str(e), "kind": e.kind.value})
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            self._respond(400, {"error": str(e), "kind": "bad_request"})
        except Exception as e:
            logger.error("request_failed", path=self.path, error_type=type(e).__name__)
            self._respond(500, {"error": str(e), "kind": "internal"})

    def do_DELETE(self) -> None:
        if self.path == "/session":
            _get_gate().clear_session()
            self._respond(200, {"status": "cleared"})
        else:
            self._respond(404, {"error": "not found"})


def make_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    gate: SecurityGate | None = None,
) -> HTTPServer:
    """Bind the sidecar without starting it.  Port 0 picks a free port."""
    global _gate
    if gate is not None:
        _gate = gate
    return HTTPServer((host, port), GateHandler)


def serve(
    port: int = DEFAULT_PORT,
    config: GateConfig | None = None,
    host: str = DEFAULT_HOST,
) -> None:
    """Start the gate HTTP sidecar."""
    gate = create_gate(config)
    server = make_server(host, port, gate)
    logger.info(
        "server_started",
        url=f"http://{host}:{server.server_address[1]}",
        redactor=gate.redactor.name,
        max_input_chars=gate.max_input_chars,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("server_stopping")
        gate.clear_session()
        server.server_close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="redaction-gate HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args()
    serve(port=args.port)
