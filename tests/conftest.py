import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
import structlog

from redaction_gate import SecurityGate, get_default_gate


@pytest.fixture(autouse=True)
def _reset_state():
    yield
    get_default_gate().clear_session()
    structlog.reset_defaults()


@pytest.fixture
def gate() -> SecurityGate:
    return SecurityGate()


@pytest.fixture
def live_gate(gate: SecurityGate) -> SecurityGate:
    gate.init_session()
    return gate
