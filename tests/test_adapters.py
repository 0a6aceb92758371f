"""Tests for the contract loader and the WAV converter."""

import io
import wave
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from redaction_gate import loader
from redaction_gate.audio import pcm_to_wav


# ── Loader ───────────────────────────────────────────────────────────

class FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_string_is_returned_unchanged():
    assert loader.parse_contract("raw contract text") == "raw contract text"


def test_text_file(tmp_path):
    path = tmp_path / "nda.txt"
    path.write_bytes("Term: 2 years\n".encode("utf-8") + b"\xff")
    text = loader.parse_contract(path)
    assert text.startswith("Term: 2 years\n")
    assert text.endswith("\ufffd")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        loader.parse_contract(tmp_path / "missing.pdf")


def test_pdf_pages_joined(tmp_path, monkeypatch):
    path = tmp_path / "msa.pdf"
    path.write_bytes(b"%PDF-1.4")
    pages = [FakePage("Page one"), FakePage(None), FakePage("   "), FakePage("Page two")]
    monkeypatch.setattr(loader.pdfplumber, "open", lambda p: FakePdf(pages))

    with capture_logs() as logs:
        text = loader.parse_contract(path)
    assert text == "Page one\n\nPage two"
    loaded = [e for e in logs if e["event"] == "contract_loaded"][0]
    assert loaded["pages"] == 4
    assert loaded["chars"] == len(text)
    assert "Page one" not in repr(logs)


def test_pdf_failure_is_logged_and_raised(tmp_path, monkeypatch):
    path = tmp_path / "broken.PDF"
    path.write_bytes(b"not a pdf")

    def boom(p):
        raise OSError("corrupt")

    monkeypatch.setattr(loader.pdfplumber, "open", boom)
    with capture_logs() as logs:
        with pytest.raises(OSError):
            loader.load_file(Path(path))
    assert logs[-1]["event"] == "pdf_extraction_failed"


# ── Audio ────────────────────────────────────────────────────────────

def test_wav_header():
    pcm = b"\x00\x01" * 100
    data = pcm_to_wav(pcm)
    assert len(data) == 44 + len(pcm)
    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WAVE"
    assert data[36:40] == b"data"

    with wave.open(io.BytesIO(data), "rb") as wav:
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == 24_000
        assert wav.readframes(100) == pcm


def test_wav_custom_rate():
    data = pcm_to_wav(b"\x00" * 8, sample_rate=16_000, channels=2)
    with wave.open(io.BytesIO(data), "rb") as wav:
        assert wav.getframerate() == 16_000
        assert wav.getnchannels() == 2
        assert wav.getnframes() == 2
