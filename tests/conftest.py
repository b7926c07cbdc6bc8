# tests/conftest.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Test configuration and shared fixtures for pytest

"""Test configuration and shared fixtures for the SVAMon test suite.

The configuration handles:
- Python path setup so the package imports without installation
- Quiet logging for every test
- Small helpers for building traces column by column
"""

import sys
from pathlib import Path

import pytest

# Ensure project modules can be imported
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Keep engine logging at WARNING for the whole session."""
    from svamon.utils.logger import LogLevel, set_log_level

    set_log_level(LogLevel.WARNING)
    yield


@pytest.fixture
def make_trace():
    """Build a Trace from per-signal high-cycle sets or value lists.

    Returns:
        Callable: ``make_trace(length, **signals) -> Trace``
    """
    from svamon.model import Trace

    def _make(length, **signals):
        return Trace.from_signals(length, **signals)

    return _make


@pytest.fixture
def e2e_trace(make_trace):
    """Twenty cycles, ``foo`` high at cycle 2 only, ``bar`` high at cycles 3 and 4."""
    return make_trace(20, foo={2}, bar={3, 4})
