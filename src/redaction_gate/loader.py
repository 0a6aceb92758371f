"""
Contract text loading.

Turns typed text, a plain-text file or a PDF into a single string for the
gate.  Nothing here redacts; the result still has to go through
``SecurityGate.secure_execute`` before it leaves the process.
"""

from __future__ import annotations
from pathlib import Path

import pdfplumber
import structlog

logger = structlog.get_logger(__name__)


def parse_contract(source: str | Path) -> str:
    """
    Return the contract text for ``source``.

    A ``str`` is taken to be the contract text itself and returned
    unchanged; a ``Path`` is read from disk.
    """
    if isinstance(source, str):
        return source
    return load_file(source)


def load_file(file_path: Path | str) -> str:
    """Read a contract file; PDFs are extracted page by page."""
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Contract file not found: {file_path}")

    if file_path.suffix.lower() == ".pdf":
        text, pages = extract_pdf_text(file_path)
    else:
        text = file_path.read_bytes().decode("utf-8", errors="replace")
        pages = None

    logger.info(
        "contract_loaded",
        filename=file_path.name,
        chars=len(text),
        pages=pages,
    )
    return text


def extract_pdf_text(file_path: Path) -> tuple[str, int]:
    """
    Extract text from a PDF using pdfplumber.

    Returns (full_text, page_count).  Pages without text are skipped.
    """
    parts: list[str] = []
    try:
        with pdfplumber.open(file_path) as pdf:
            page_count = len(pdf.pages)
            for page in pdf.pages:
                page_text = page.extract_text() or ""
                if page_text.strip():
                    parts.append(page_text)
    except Exception as e:
        logger.error("pdf_extraction_failed", file=file_path.name, error=str(e))
        raise

    return "\n\n".join(parts), page_count
