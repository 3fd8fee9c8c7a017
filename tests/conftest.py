"""Pytest fixtures for all tests."""

import pytest

from tsid.core.identifier import Tsid
from tsid.services import registry

TSID_ENV_VARS = (
    "TSID_NODE",
    "TSID_EPOCH",
    "TSID_ON_EXHAUSTED",
    "TSID_ON_CLOCK_REGRESSION",
    "TSID_RANDOM_START",
    "TSID_LOG_LEVEL",
)

# 2023-11-14T22:13:20Z
BASE_MILLIS = 1_700_000_000_000


class ScriptedClock:
    """A clock that returns the given readings in order, then repeats the last one."""

    def __init__(self, readings):
        self.readings = list(readings)
        self.reads = 0

    def __call__(self):
        index = min(self.reads, len(self.readings) - 1)
        self.reads += 1
        return self.readings[index]


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now=BASE_MILLIS):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, millis=1):
        self.now += millis


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep TSID_* variables and any stray .env file out of every test."""
    for name in TSID_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def clean_registry():
    """Start and finish every test without a shared factory."""
    registry.reset()
    yield
    registry.reset()


@pytest.fixture
def fixed_clock():
    return FixedClock()


@pytest.fixture
def scripted_clock():
    return ScriptedClock


@pytest.fixture
def default_tsid():
    """The Snowflake ID sample from Wikipedia: 1541815603606036480."""
    return Tsid(367597485448, 378, 0)
