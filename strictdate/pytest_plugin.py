"""pytest integration: freeze the process clock from a test marker.

    @pytest.mark.freeze_time                      # real current instant
    @pytest.mark.freeze_time("yesterday 08:00")   # modifier on the real time
    @pytest.mark.freeze_time(datetime(2017, 11, 28, tzinfo=timezone.utc))

The marker may decorate a test function, a class or a module (closest
wins). The marker name is configurable with the ``freeze_time_marker`` ini
option.
"""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from strictdate.config import get_config
from strictdate.core.clock import SystemClock, get_default_clock
from strictdate.core.modifier import apply_modifier

logger = logging.getLogger(__name__)

MARKER_INI = "freeze_time_marker"
FROZEN_KEY = pytest.StashKey[datetime]()


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        MARKER_INI,
        help="Name of the marker that freezes strictdate's clock for a test.",
        default=get_config().freeze_marker,
    )


def pytest_configure(config: pytest.Config) -> None:
    name = config.getini(MARKER_INI)
    config.addinivalue_line(
        "markers",
        f"{name}(modifier=None): freeze strictdate's clock for the test, "
        "at the real current time adjusted by the optional modifier",
    )


def instant_from_marker(marker: pytest.Mark) -> datetime:
    """Build the instant to freeze from a marker's first argument."""
    argument = marker.args[0] if marker.args else marker.kwargs.get("modifier")
    if isinstance(argument, datetime):
        return argument
    current = SystemClock().now()
    if not argument:
        return current
    return apply_modifier(current, str(argument))


@pytest.fixture
def frozen_instant(
    request: pytest.FixtureRequest, _strictdate_freeze_time: None
) -> datetime | None:
    """Instant frozen by the marker for this test, if any."""
    return request.node.stash.get(FROZEN_KEY, None)


@pytest.fixture(autouse=True)
def _strictdate_freeze_time(request: pytest.FixtureRequest):
    marker = request.node.get_closest_marker(request.config.getini(MARKER_INI))
    if marker is None:
        yield
        return

    clock = get_default_clock()
    instant = instant_from_marker(marker)
    clock.freeze(instant)
    request.node.stash[FROZEN_KEY] = instant
    logger.debug("Froze time at %s for %s", instant.isoformat(), request.node.nodeid)
    try:
        yield
    finally:
        clock.unfreeze()
