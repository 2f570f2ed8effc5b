"""
Configuration file for pytest.
This file ensures the project root is in the Python path and provides
shared fixtures for feed/decision tests.
"""

import os
import sys

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Importing main configures logging; keep the test run from writing a log file
os.environ["SELLER_LOG_FILE"] = ""

from core.feed_state import FeedState  # noqa: E402


class FakeTime:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def reference_state(fake_time):
    return FeedState("reference", "SOL/USDT", time_fn=fake_time)


@pytest.fixture
def executable_state(fake_time):
    return FeedState("executable", "SOL/USD", time_fn=fake_time)
