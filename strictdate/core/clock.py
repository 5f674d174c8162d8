"""Clock abstraction with a freezable "current time".

The process-wide default clock keeps a stack of frozen instants. While the
stack is non-empty its top is returned as "now"; otherwise the live system
time is used. Stack access is guarded by a lock, but the stack itself is
shared by every thread and asyncio task of the process: concurrent freezes
from unrelated tests interfere with each other's notion of "now". Run
parallel tests in separate processes (e.g. pytest-xdist), or give code under
test its own :class:`FreezableClock` instance.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, tzinfo
from typing import Iterator, Protocol

from strictdate.config import get_config
from strictdate.core.errors import EmptyStackError
from strictdate.core.modifier import apply_modifier

logger = logging.getLogger(__name__)


class TimeSource(Protocol):
    def now(self) -> datetime: ...


class Clock(TimeSource, Protocol):
    def at(self, modifier: str) -> datetime: ...

    def freeze(self, instant: datetime) -> None: ...

    def unfreeze(self) -> datetime: ...

    def is_frozen(self) -> bool: ...


class SystemClock:
    """Live system clock; time always flows.

    Instants are aware datetimes in ``zone``, or in the configured default
    timezone when no zone is given.
    """

    def __init__(self, zone: tzinfo | None = None) -> None:
        self._zone = zone

    def now(self) -> datetime:
        return datetime.now(self._zone or get_config().tzinfo)

    def at(self, modifier: str) -> datetime:
        return apply_modifier(self.now(), modifier)

    def freeze(self, instant: datetime) -> None:
        raise NotImplementedError("SystemClock cannot be frozen")

    def unfreeze(self) -> datetime:
        raise NotImplementedError("SystemClock cannot be frozen")

    def is_frozen(self) -> bool:
        return False


class FreezableClock:
    """Clock whose "now" can be overridden by a stack of frozen instants."""

    def __init__(self, source: TimeSource | None = None) -> None:
        self._source = source or SystemClock()
        self._frozen: list[datetime] = []
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            if self._frozen:
                return self._frozen[-1]
        return self._source.now()

    def at(self, modifier: str) -> datetime:
        return apply_modifier(self.now(), modifier)

    def freeze(self, instant: datetime) -> None:
        """Push ``instant``; it shadows earlier freezes until unfrozen."""
        if not isinstance(instant, datetime):
            raise TypeError(f"Expected a datetime, got {type(instant).__name__}")
        if instant.tzinfo is None:
            raise ValueError("freeze() requires a timezone-aware datetime.")
        with self._lock:
            self._frozen.append(instant)
            depth = len(self._frozen)
        logger.debug("Time frozen at %s (depth %d)", instant.isoformat(), depth)

    def unfreeze(self) -> datetime:
        """Pop and return the most recently frozen instant."""
        with self._lock:
            if not self._frozen:
                raise EmptyStackError()
            instant = self._frozen.pop()
            depth = len(self._frozen)
        logger.debug("Time unfrozen from %s (depth %d)", instant.isoformat(), depth)
        return instant

    def is_frozen(self) -> bool:
        with self._lock:
            return bool(self._frozen)

    def reset(self) -> None:
        """Drop every frozen instant; time flows again."""
        with self._lock:
            dropped = len(self._frozen)
            self._frozen.clear()
        if dropped:
            logger.debug("Clock reset, %d frozen instant(s) dropped", dropped)

    @contextmanager
    def frozen(self, instant: datetime) -> Iterator[datetime]:
        self.freeze(instant)
        try:
            yield instant
        finally:
            self.unfreeze()


# ---------------------------------------------------------------------------
# Process-wide default clock
# ---------------------------------------------------------------------------

_default_clock: FreezableClock = FreezableClock()


def get_default_clock() -> FreezableClock:
    return _default_clock


def set_default_clock(clock: FreezableClock) -> FreezableClock:
    """Install ``clock`` as the process clock and return the previous one."""
    global _default_clock
    previous, _default_clock = _default_clock, clock
    return previous


def now() -> datetime:
    """Current instant of the default clock."""
    return _default_clock.now()


def at(modifier: str) -> datetime:
    """Apply ``modifier`` (e.g. ``"tomorrow 08:00"``) to :func:`now`."""
    return _default_clock.at(modifier)


def freeze(instant: datetime) -> None:
    _default_clock.freeze(instant)


def unfreeze() -> datetime:
    return _default_clock.unfreeze()


def is_frozen() -> bool:
    return _default_clock.is_frozen()


@contextmanager
def frozen(instant: datetime) -> Iterator[datetime]:
    """Freeze the default clock at ``instant`` for the duration of the block."""
    with _default_clock.frozen(instant) as value:
        yield value
