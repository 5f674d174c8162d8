"""Relative and absolute date modifier expressions.

A modifier such as ``"tomorrow 08:00"``, ``"-8 minutes"``,
``"first day of next month"`` or ``"2 days 3 hours ago"`` is parsed into a
:class:`Modification` and applied to a base instant. Absolute parts (dates,
times, ``today``) are applied first, then relative offsets, then weekday
moves, then ``first/last day of``. Month and year arithmetic clamps to the
end of the month, as :class:`dateutil.relativedelta.relativedelta` does.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta, weekday

from strictdate.core.errors import InvalidModifierError

_UNIT_NAMES = (
    (("usec", "usecs", "microsecond", "microseconds"), ("microseconds", 1)),
    (("msec", "msecs", "millisecond", "milliseconds"), ("microseconds", 1000)),
    (("sec", "secs", "second", "seconds"), ("seconds", 1)),
    (("min", "mins", "minute", "minutes"), ("minutes", 1)),
    (("hour", "hours"), ("hours", 1)),
    (("day", "days"), ("days", 1)),
    (("week", "weeks"), ("weeks", 1)),
    (("fortnight", "fortnights"), ("weeks", 2)),
    (("month", "months"), ("months", 1)),
    (("year", "years"), ("years", 1)),
)

# unit word -> (relativedelta keyword, multiplier)
UNITS: dict[str, tuple[str, int]] = {
    name: target for names, target in _UNIT_NAMES for name in names
}

_DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WEEKDAYS: dict[str, weekday] = {
    name[:length]: day
    for name, day in zip(_DAY_NAMES, (MO, TU, WE, TH, FR, SA, SU))
    for length in (3, None)
}

_SEPARATOR = re.compile(r"[\s,]+")
_TIMESTAMP = re.compile(r"@(-?\d+)(?:\.(\d{1,6}))?")
_DATE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})t?")
_CLOCK_TIME = re.compile(
    r"(\d{1,2}):(\d{2})(?::(\d{2})(?:[.,](\d{1,6}))?)?(?:\s*([ap])\.?m\.?)?(?![\w:])"
)
_HOUR_MERIDIEM = re.compile(r"(\d{1,2})\s*([ap])\.?m\.?(?!\w)")
_RELATIVE = re.compile(r"([+-]?)\s*(\d+)\s*([a-z]+)\b")
_DAY_OF = re.compile(r"(first|last)\s+day\s+of\b")
_WORD = re.compile(r"[a-z]+\b")
_NEXT_WORD = re.compile(r"\s+([a-z]+)\b")

_DIRECTIONS = {"next": 1, "last": -1, "previous": -1, "this": 0}


@dataclass
class Modification:
    """Parsed modifier, applied with :meth:`apply`."""

    timestamp: datetime | None = None
    on_date: date | None = None
    at_time: time | None = None
    reset_time: bool = False
    offsets: dict[str, int] = field(default_factory=dict)
    weekday_shift: relativedelta | None = None
    day_of: str | None = None  # "first" | "last"

    def add_offset(self, unit: str, amount: int) -> None:
        key, multiplier = UNITS[unit]
        self.offsets[key] = self.offsets.get(key, 0) + amount * multiplier

    def apply(self, base: datetime) -> datetime:
        result = base
        if self.timestamp is not None:
            result = self.timestamp.astimezone(base.tzinfo) if base.tzinfo else self.timestamp
        if self.on_date is not None:
            result = result.replace(
                year=self.on_date.year, month=self.on_date.month, day=self.on_date.day
            )
        if self.at_time is not None:
            result = result.replace(
                hour=self.at_time.hour,
                minute=self.at_time.minute,
                second=self.at_time.second,
                microsecond=self.at_time.microsecond,
            )
        elif self.reset_time or self.on_date is not None:
            result = result.replace(hour=0, minute=0, second=0, microsecond=0)
        if self.offsets:
            result = result + relativedelta(**self.offsets)
        if self.weekday_shift is not None:
            result = result + self.weekday_shift
        if self.day_of == "first":
            result = result.replace(day=1)
        elif self.day_of == "last":
            result = result + relativedelta(day=31)
        return result


class _Scanner:
    def __init__(self, modifier: str) -> None:
        self.modifier = modifier
        self.text = modifier.lower()
        self.pos = 0
        self.result = Modification()

    def fail(self, reason: str) -> InvalidModifierError:
        return InvalidModifierError(self.modifier, reason)

    def match(self, regex: re.Pattern[str]) -> re.Match[str] | None:
        found = regex.match(self.text, self.pos)
        if found is not None:
            self.pos = found.end()
        return found

    def set_time(self, value: time) -> None:
        if self.result.at_time is not None:
            raise self.fail("time given twice")
        self.result.at_time = value

    def run(self) -> Modification:
        while True:
            self.match(_SEPARATOR)
            if self.pos >= len(self.text):
                return self.result
            if not self.clause():
                raise self.fail(f"unexpected text at {self.text[self.pos:]!r}")

    def clause(self) -> bool:
        return (
            self.timestamp_clause()
            or self.date_clause()
            or self.time_clause()
            or self.relative_clause()
            or self.day_of_clause()
            or self.word_clause()
        )

    def timestamp_clause(self) -> bool:
        found = self.match(_TIMESTAMP)
        if found is None:
            return False
        seconds, fraction = found.groups()
        try:
            self.result.timestamp = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(
                seconds=int(seconds), microseconds=int((fraction or "0").ljust(6, "0"))
            )
        except OverflowError as exc:
            raise self.fail(str(exc)) from exc
        return True

    def date_clause(self) -> bool:
        found = self.match(_DATE)
        if found is None:
            return False
        if self.result.on_date is not None:
            raise self.fail("date given twice")
        try:
            self.result.on_date = date(*(int(part) for part in found.groups()))
        except ValueError as exc:
            raise self.fail(str(exc)) from exc
        return True

    def time_clause(self) -> bool:
        found = self.match(_CLOCK_TIME)
        if found is not None:
            hour, minute, second, fraction, meridiem = found.groups()
            self.set_time(
                self._clock(int(hour), int(minute), int(second or 0), fraction, meridiem)
            )
            return True
        found = self.match(_HOUR_MERIDIEM)
        if found is not None:
            hour, meridiem = found.groups()
            self.set_time(self._clock(int(hour), 0, 0, None, meridiem))
            return True
        return False

    def _clock(
        self, hour: int, minute: int, second: int, fraction: str | None, meridiem: str | None
    ) -> time:
        if meridiem is not None:
            if not 1 <= hour <= 12:
                raise self.fail(f"hour {hour} is not valid with am/pm")
            hour = hour % 12 + (12 if meridiem == "p" else 0)
        try:
            return time(hour, minute, second, int((fraction or "0").ljust(6, "0")))
        except ValueError as exc:
            raise self.fail(str(exc)) from exc

    def relative_clause(self) -> bool:
        start = self.pos
        found = self.match(_RELATIVE)
        if found is None:
            return False
        sign, amount, unit = found.groups()
        if unit not in UNITS:
            self.pos = start
            return False
        self.result.add_offset(unit, -int(amount) if sign == "-" else int(amount))
        return True

    def day_of_clause(self) -> bool:
        found = self.match(_DAY_OF)
        if found is None:
            return False
        self.result.day_of = found.group(1)
        return True

    def word_clause(self) -> bool:
        start = self.pos
        found = self.match(_WORD)
        if found is None:
            return False
        word = found.group(0)
        result = self.result
        if word == "now":
            pass
        elif word in ("today", "midnight"):
            result.reset_time = True
        elif word == "noon":
            self.set_time(time(12))
        elif word in ("tomorrow", "yesterday"):
            result.add_offset("day", 1 if word == "tomorrow" else -1)
            result.reset_time = True
        elif word == "ago":
            result.offsets = {key: -value for key, value in result.offsets.items()}
        elif word in WEEKDAYS:
            self.move_to_weekday(WEEKDAYS[word], 0)
        elif word in _DIRECTIONS:
            return self.direction_clause(_DIRECTIONS[word])
        else:
            self.pos = start
            return False
        return True

    def direction_clause(self, direction: int) -> bool:
        found = self.match(_NEXT_WORD)
        if found is None:
            raise self.fail("expected a unit or weekday after a direction word")
        target = found.group(1)
        if target in UNITS:
            self.result.add_offset(target, direction)
        elif target in WEEKDAYS:
            self.move_to_weekday(WEEKDAYS[target], direction)
        else:
            raise self.fail(f"unknown unit {target!r}")
        return True

    def move_to_weekday(self, day: weekday, direction: int) -> None:
        if self.result.weekday_shift is not None:
            raise self.fail("weekday given twice")
        if direction > 0:
            self.result.weekday_shift = relativedelta(days=1, weekday=day(+1))
        elif direction < 0:
            self.result.weekday_shift = relativedelta(days=-1, weekday=day(-1))
        else:
            self.result.weekday_shift = relativedelta(weekday=day(+1))
        self.result.reset_time = True


def parse_modifier(modifier: str) -> Modification:
    """Parse ``modifier``; raises :class:`InvalidModifierError` on unknown text."""
    return _Scanner(modifier).run()


def apply_modifier(base: datetime, modifier: str) -> datetime:
    modification = parse_modifier(modifier)
    try:
        return modification.apply(base)
    except (ValueError, OverflowError) as exc:
        raise InvalidModifierError(modifier, str(exc)) from exc
