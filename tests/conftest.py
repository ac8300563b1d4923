"""Shared pytest fixtures for GrappleTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QCoreApplication

from grappletimer.timer.engine import TimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def engine(qapp, clock):
    """Fresh TimerEngine driven by a fake clock."""
    eng = TimerEngine(parent=None, clock=clock)
    yield eng
    eng.stop()
