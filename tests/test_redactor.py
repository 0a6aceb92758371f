"""Tests for the pattern table, the redactor strategies and the NER layer."""

from types import SimpleNamespace

from redaction_gate import CATEGORIES, PatternRedactor, redact_pii, scan_patterns
from redaction_gate.presidio_layer import PresidioRedactor


# ── Pattern table ────────────────────────────────────────────────────

def test_category_order():
    assert CATEGORIES == ("EMAIL", "PHONE", "SSN", "CREDIT_CARD", "ADDRESS")


def test_email_and_phone():
    text = "Contact me at jane@example.com or 555-123-4567"
    assert redact_pii(text) == "Contact me at {REDACTED_EMAIL} or {REDACTED_PHONE}"


def test_ssn():
    assert redact_pii("SSN: 123-45-6789") == "SSN: {REDACTED_SSN}"


def test_email_removed_from_output():
    out = redact_pii("Send the signed copy to counsel.office+nda@lawfirm.co.uk today")
    assert "counsel.office+nda@lawfirm.co.uk" not in out
    assert out == "Send the signed copy to {REDACTED_EMAIL} today"


def test_phone_formats():
    assert redact_pii("Call (555) 123-4567 now") == "Call {REDACTED_PHONE} now"
    assert redact_pii("Call +1 555.123.4567 now") == "Call {REDACTED_PHONE} now"


def test_credit_card_with_separators():
    assert redact_pii("Card: 4111-1111-1111-1111") == "Card: {REDACTED_CREDIT_CARD}"
    assert redact_pii("Card: 4111 1111 1111 1111") == "Card: {REDACTED_CREDIT_CARD}"


def test_address():
    assert redact_pii("Office at 42 Baker Street.") == "Office at {REDACTED_ADDRESS}"
    assert redact_pii("Ship to 1600 amphitheatre way") == "Ship to {REDACTED_ADDRESS}"


def test_no_name_detection():
    # Pattern-only redaction: names pass through untouched
    text = "This agreement is made between Alice Johnson and Acme Corp."
    assert redact_pii(text) == text


def test_clean_text_unchanged():
    text = "The Licensee shall not sublicense the Software without prior written consent."
    assert redact_pii(text) == text


def test_empty_string():
    assert redact_pii("") == ""
    assert scan_patterns("").entities == []


def test_placeholders_are_stable():
    text = (
        "Email jane@example.com, call 555-123-4567, SSN 123-45-6789, "
        "card 4111-1111-1111-1111, home 42 Baker Street."
    )
    once = redact_pii(text)
    assert once == (
        "Email {REDACTED_EMAIL}, call {REDACTED_PHONE}, SSN {REDACTED_SSN}, "
        "card {REDACTED_CREDIT_CARD}, home {REDACTED_ADDRESS}"
    )
    assert redact_pii(once) == once


def test_scan_records_matches_per_pass():
    result = scan_patterns("a@b.io and c@d.io, SSN 123-45-6789")
    assert result.categories == {"EMAIL": 2, "SSN": 1}
    assert [e.text for e in result.entities] == ["a@b.io", "c@d.io", "123-45-6789"]
    assert all(e.source == "pattern" for e in result.entities)


def test_deterministic():
    text = "Reach me at 555-123-4567 or 12 Elm Rd"
    assert redact_pii(text) == redact_pii(text)


# ── Redactor capability ──────────────────────────────────────────────

def test_pattern_redactor_views_agree():
    r = PatternRedactor()
    text = "Email: john@acme.com"
    assert r.apply(text) == "Email: {REDACTED_EMAIL}"
    assert [m.category for m in r.detect(text)] == ["EMAIL"]
    assert r.redact(text).text == r.apply(text)


# ── Presidio layer (fake engine) ─────────────────────────────────────

class FakeEngine:
    def __init__(self, hits):
        self.hits = hits
        self.calls = []

    def analyze(self, *, text, language, entities, score_threshold):
        self.calls.append(text)
        results = []
        for entity_type, value, score in self.hits:
            start = text.find(value)
            if start != -1:
                results.append(SimpleNamespace(
                    entity_type=entity_type, start=start, end=start + len(value), score=score,
                ))
        return results


def test_presidio_runs_after_patterns():
    engine = FakeEngine([("PERSON", "Alice Johnson", 0.85)])
    r = PresidioRedactor(engine=engine)
    result = r.redact("Alice Johnson <alice@example.com>")
    assert result.text == "{REDACTED_PERSON} <{REDACTED_EMAIL}>"
    # The analyzer only ever saw pattern-redacted text
    assert engine.calls == ["Alice Johnson <{REDACTED_EMAIL}>"]
    assert result.categories == {"EMAIL": 1, "PERSON": 1}


def test_presidio_skips_placeholders():
    engine = FakeEngine([("LOCATION", "{REDACTED_ADDRESS}", 0.9)])
    r = PresidioRedactor(engine=engine)
    result = r.redact("Deliver to 42 Baker Street")
    assert result.text == "Deliver to {REDACTED_ADDRESS}"
    assert [e.source for e in result.entities] == ["pattern"]


def test_presidio_overlaps_keep_higher_score():
    engine = FakeEngine([
        ("LOCATION", "New York", 0.5),
        ("PERSON", "New York Smith", 0.9),
    ])
    r = PresidioRedactor(engine=engine)
    assert r.apply("Signed by New York Smith") == "Signed by {REDACTED_PERSON}"


def test_presidio_empty_input_skips_engine():
    engine = FakeEngine([])
    assert PresidioRedactor(engine=engine).apply("") == ""
    assert engine.calls == []
