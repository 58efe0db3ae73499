"""
Shared fixtures for the PDF export test suite
"""

import pytest

from backend.app.capture import CaptureSession, HandleRegistry
from tests.fakes import RecordingSink, SleepRecorder


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def registry():
    return HandleRegistry()


@pytest.fixture
def capture(registry, sleeper):
    return CaptureSession(registry, "run-test", initial_settle_s=1.0, settle_s=0.5, sleep=sleeper)
