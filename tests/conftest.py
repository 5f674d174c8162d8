"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from strictdate.config import configure, reset_config
from strictdate.core.clock import FreezableClock, set_default_clock

pytest_plugins = ["pytester"]

# Tuesday
REFERENCE = datetime(2017, 11, 28, 14, 5, 10, 123456, tzinfo=timezone.utc)


class FixedClock:
    """Time source that always returns the same instant."""

    def __init__(self, instant: datetime = REFERENCE):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


@pytest.fixture(autouse=True)
def utc_config():
    configure(timezone="UTC")
    yield
    reset_config()


@pytest.fixture
def fixed_source():
    return FixedClock()


@pytest.fixture
def clock():
    return FreezableClock()


@pytest.fixture
def default_clock():
    """Install a fresh process clock for the test and restore the old one."""
    fresh = FreezableClock()
    previous = set_default_clock(fresh)
    yield fresh
    set_default_clock(previous)
