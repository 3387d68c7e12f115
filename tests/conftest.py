"""
Configuration for pytest to set up the import path and isolate settings.
"""

import sys
from pathlib import Path

import pytest


# Add the project root to Python path so we can import envelope, lazy, etc.
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Import after path setup
from models import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings, unaffected by the environment."""
    for var in (
        "ENVELOPE_HASH_SEED",
        "ENVELOPE_HASH_MULTIPLIER",
        "ENVELOPE_DEFAULT_REFRESH",
        "ENVELOPE_NEGATIVE_COUNT",
        "ENVELOPE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def call_counter():
    """A transform that records how many times it ran."""
    calls = []

    def track(x):
        calls.append(x)
        return x * 2

    track.calls = calls
    return track
