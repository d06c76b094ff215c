"""Shared pytest fixtures for WorkoutTimer tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from workouttimer.cues.scheduler import CueScheduler
from workouttimer.database.db import configure_engine, init_db
from workouttimer.timer.engine import IntervalTimer

from helpers import FakeClock, FakeFacility


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def settings_dir(tmp_path, monkeypatch):
    """Keep settings writes out of the real home directory."""
    monkeypatch.setattr("workouttimer.settings.APP_SUPPORT_DIR", tmp_path)
    monkeypatch.setattr("workouttimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
    return tmp_path


@pytest.fixture
def clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def facility(clock):
    return FakeFacility(clock)


@pytest.fixture
def cues(facility):
    return CueScheduler(facility)


@pytest.fixture
def timer(qapp, clock, cues):
    """Fresh IntervalTimer on the fake clock: 45 s work, 15 s rest, 3 rounds."""
    t = IntervalTimer(parent=None, clock=clock, cues=cues, drive_ticks=False)
    t.set_work_time(45)
    t.set_rest_time(15)
    t.set_rounds(3)
    return t
