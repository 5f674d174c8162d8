"""Format patterns: anchored matching and formatting of instants.

Patterns use strftime-style directives. Unlike :meth:`datetime.strptime`,
fields missing from a pattern default to the Unix epoch baseline
(1970-01-01 00:00:00) and conflicting fields are rejected instead of one
silently winning.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Any, Callable

from dateutil import tz

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# English only: locale-aware names are out of scope.
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
DAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


def _names_regex(names: tuple[str, ...]) -> str:
    return "(?i:" + "|".join(names) + ")"


def _name_index(names: tuple[str, ...]) -> Callable[[str], int]:
    lookup = {name.lower(): i for i, name in enumerate(names)}
    return lambda text: lookup[text.lower()]


def _two_digit_year(text: str) -> int:
    value = int(text)
    return 1900 + value if value >= 69 else 2000 + value


def _fraction(text: str) -> int:
    return int(text.ljust(6, "0"))


def _offset(text: str) -> tzinfo:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if minutes >= 60:
        raise ValueError(f"UTC offset minutes out of range: {text!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


_OFFSET_NAME = re.compile(r"(?:UTC|GMT)([+-]\d{2}:?\d{2})", re.IGNORECASE)


def _zone_name(text: str) -> tzinfo:
    if text.upper() in ("UTC", "GMT", "Z"):
        return timezone.utc
    # fixed-offset datetime.timezone renders as "UTC+01:00"
    offset = _OFFSET_NAME.fullmatch(text)
    if offset:
        return _offset(offset.group(1))
    resolved = tz.gettz(text)
    if resolved is None:
        raise ValueError(f"Unknown timezone: {text!r}")
    return resolved


@dataclass(frozen=True)
class Directive:
    regex: str
    field: str
    convert: Callable[[str], Any]
    render: Callable[[datetime], str]


_MONTH_ABBR = tuple(name[:3] for name in MONTH_NAMES)
_DAY_ABBR = tuple(name[:3] for name in DAY_NAMES)
_month_abbr_index = _name_index(_MONTH_ABBR)
_month_index = _name_index(MONTH_NAMES)


def _offset_text(dt: datetime) -> str:
    return dt.strftime("%z")


def _unix_seconds(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return str((dt - EPOCH) // timedelta(seconds=1))


DIRECTIVES: dict[str, Directive] = {
    "Y": Directive(r"\d{4}", "year", int, lambda dt: f"{dt.year:04d}"),
    "y": Directive(r"\d{2}", "year", _two_digit_year, lambda dt: f"{dt.year % 100:02d}"),
    "m": Directive(r"\d{1,2}", "month", int, lambda dt: f"{dt.month:02d}"),
    "b": Directive(
        _names_regex(_MONTH_ABBR), "month",
        lambda s: _month_abbr_index(s) + 1,
        lambda dt: _MONTH_ABBR[dt.month - 1],
    ),
    "B": Directive(
        _names_regex(MONTH_NAMES), "month",
        lambda s: _month_index(s) + 1,
        lambda dt: MONTH_NAMES[dt.month - 1],
    ),
    "d": Directive(r"\d{1,2}", "day", int, lambda dt: f"{dt.day:02d}"),
    "j": Directive(r"\d{1,3}", "yday", int, lambda dt: f"{dt.timetuple().tm_yday:03d}"),
    "a": Directive(
        _names_regex(_DAY_ABBR), "weekday", _name_index(_DAY_ABBR),
        lambda dt: _DAY_ABBR[dt.weekday()],
    ),
    "A": Directive(
        _names_regex(DAY_NAMES), "weekday", _name_index(DAY_NAMES),
        lambda dt: DAY_NAMES[dt.weekday()],
    ),
    "H": Directive(r"\d{1,2}", "hour", int, lambda dt: f"{dt.hour:02d}"),
    "I": Directive(r"\d{1,2}", "hour12", int, lambda dt: f"{dt.hour % 12 or 12:02d}"),
    "p": Directive(
        r"(?i:am|pm)", "meridiem", str.upper,
        lambda dt: "AM" if dt.hour < 12 else "PM",
    ),
    "M": Directive(r"\d{1,2}", "minute", int, lambda dt: f"{dt.minute:02d}"),
    "S": Directive(r"\d{1,2}", "second", int, lambda dt: f"{dt.second:02d}"),
    "f": Directive(r"\d{1,6}", "microsecond", _fraction, lambda dt: f"{dt.microsecond:06d}"),
    "s": Directive(r"-?\d+", "timestamp", int, _unix_seconds),
    "z": Directive(r"Z|[+-]\d{2}:?\d{2}", "tzinfo", _offset, _offset_text),
    "Z": Directive(
        r"[A-Za-z][A-Za-z0-9_+\-/]*(?::\d{2})?", "tzinfo", _zone_name,
        lambda dt: dt.tzname() or "",
    ),
}


def tokenize(pattern: str) -> list[tuple[bool, str]]:
    """Split a pattern into ``(is_directive, text)`` tokens."""
    tokens: list[tuple[bool, str]] = []
    literal: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char != "%":
            literal.append(char)
            continue
        code = next(chars, None)
        if code is None:
            raise ValueError(f"Pattern {pattern!r} ends with a lone '%'")
        if code == "%":
            literal.append("%")
            continue
        if code not in DIRECTIVES:
            raise ValueError(f"Unknown directive %{code} in pattern {pattern!r}")
        if literal:
            tokens.append((False, "".join(literal)))
            literal = []
        tokens.append((True, code))
    if literal:
        tokens.append((False, "".join(literal)))
    return tokens


@dataclass(frozen=True)
class CompiledPattern:
    pattern: str
    regex: re.Pattern[str]
    codes: tuple[str, ...]

    def match_fields(self, value: str) -> dict[str, Any] | None:
        """Match the whole of ``value``; ``None`` when it does not match.

        Raises ``ValueError`` when the same field is given twice with
        different values or a field cannot be converted.
        """
        match = self.regex.fullmatch(value)
        if match is None:
            return None
        fields: dict[str, Any] = {}
        for index, code in enumerate(self.codes):
            directive = DIRECTIVES[code]
            parsed = directive.convert(match.group(f"g{index}"))
            if directive.field in fields and fields[directive.field] != parsed:
                raise ValueError(f"Conflicting values for {directive.field}")
            fields[directive.field] = parsed
        return fields


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> CompiledPattern:
    parts: list[str] = []
    codes: list[str] = []
    for is_directive, text in tokenize(pattern):
        if is_directive:
            parts.append(f"(?P<g{len(codes)}>{DIRECTIVES[text].regex})")
            codes.append(text)
        else:
            parts.append(re.escape(text))
    return CompiledPattern(pattern, re.compile("".join(parts)), tuple(codes))


def format_instant(instant: datetime, pattern: str) -> str:
    """Render ``instant`` under ``pattern``; inverse of strict parsing."""
    return "".join(
        DIRECTIVES[text].render(instant) if is_directive else text
        for is_directive, text in tokenize(pattern)
    )


def _resolve_hour(fields: dict[str, Any]) -> int:
    meridiem = fields.get("meridiem")
    if "hour12" in fields:
        hour12 = fields["hour12"]
        if not 1 <= hour12 <= 12:
            raise ValueError(f"12-hour clock value out of range: {hour12}")
        hour = hour12 % 12 + (12 if meridiem == "PM" else 0)
        if "hour" in fields and fields["hour"] != hour:
            raise ValueError("Conflicting values for hour")
        return hour
    hour = fields.get("hour", 12 if meridiem == "PM" else 0)
    if meridiem is not None and "hour" in fields and (hour >= 12) != (meridiem == "PM"):
        raise ValueError("AM/PM does not agree with hour")
    return hour


def _resolve_date(fields: dict[str, Any], year: int) -> tuple[int, int]:
    if "yday" not in fields:
        return fields.get("month", 1), fields.get("day", 1)
    yday = fields["yday"]
    if not 1 <= yday <= (366 if calendar.isleap(year) else 365):
        raise ValueError(f"Day of year out of range: {yday}")
    resolved = date(year, 1, 1) + timedelta(days=yday - 1)
    for name in ("month", "day"):
        if name in fields and fields[name] != getattr(resolved, name):
            raise ValueError("Day of year does not agree with month/day")
    return resolved.month, resolved.day


def _check_agrees(instant: datetime, fields: dict[str, Any]) -> None:
    for name in ("year", "month", "day", "hour", "minute", "second"):
        if name in fields and fields[name] != getattr(instant, name):
            raise ValueError(f"{name} does not agree with the timestamp")
    if "yday" in fields and _resolve_date(fields, instant.year) != (instant.month, instant.day):
        raise ValueError("Day of year does not agree with the timestamp")
    if "hour12" in fields or "meridiem" in fields:
        _resolve_hour({**fields, "hour": instant.hour})


def build_instant(fields: dict[str, Any], default_tz: tzinfo) -> datetime:
    """Assemble matched fields over the epoch baseline.

    Raises ``ValueError`` for out-of-range or mutually inconsistent fields.
    """
    zone = fields.get("tzinfo", default_tz)
    if "timestamp" in fields:
        instant = EPOCH + timedelta(
            seconds=fields["timestamp"], microseconds=fields.get("microsecond", 0)
        )
        instant = instant.astimezone(zone)
        _check_agrees(instant, fields)
    else:
        year = fields.get("year", 1970)
        month, day = _resolve_date(fields, year)
        instant = datetime(
            year,
            month,
            day,
            _resolve_hour(fields),
            fields.get("minute", 0),
            fields.get("second", 0),
            fields.get("microsecond", 0),
            tzinfo=zone,
        )
    if "weekday" in fields and instant.weekday() != fields["weekday"]:
        raise ValueError("Weekday does not agree with the date")
    return instant
