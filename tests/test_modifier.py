"""Tests for the modifier language used by ``at()`` and the freeze marker."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from strictdate.core.errors import InvalidModifierError
from strictdate.core.modifier import apply_modifier, parse_modifier

UTC = timezone.utc
# Tuesday
BASE = datetime(2017, 11, 28, 14, 5, 10, 123456, tzinfo=UTC)


def at(modifier: str, base: datetime = BASE) -> datetime:
    return apply_modifier(base, modifier)


# ---- Absolute words ----

@pytest.mark.parametrize("modifier", ["", "   ", "now"])
def test_no_change(modifier):
    assert at(modifier) == BASE


def test_today_and_midnight_reset_time():
    assert at("today") == datetime(2017, 11, 28, tzinfo=UTC)
    assert at("midnight") == datetime(2017, 11, 28, tzinfo=UTC)


def test_noon():
    assert at("noon") == datetime(2017, 11, 28, 12, tzinfo=UTC)


def test_tomorrow_with_time():
    assert at("tomorrow 08:00") == datetime(2017, 11, 29, 8, 0, tzinfo=UTC)


def test_yesterday_resets_time():
    assert at("yesterday") == datetime(2017, 11, 27, tzinfo=UTC)
    assert at("yesterday 08:00") == datetime(2017, 11, 27, 8, 0, tzinfo=UTC)


def test_case_insensitive():
    assert at("Tomorrow 8 PM") == datetime(2017, 11, 29, 20, tzinfo=UTC)


# ---- Times and dates ----

def test_clock_time_with_seconds_and_fraction():
    assert at("08:30:15.5") == datetime(2017, 11, 28, 8, 30, 15, 500000, tzinfo=UTC)


@pytest.mark.parametrize(
    "modifier, hour",
    [("8pm", 20), ("8 p.m.", 20), ("12am", 0), ("12pm", 12), ("08:30am", 8)],
)
def test_meridiem(modifier, hour):
    assert at(modifier).hour == hour


def test_date_resets_time():
    assert at("2017-01-01") == datetime(2017, 1, 1, tzinfo=UTC)


@pytest.mark.parametrize("modifier", ["2017-01-01 08:30:15", "2017-01-01T08:30:15"])
def test_date_and_time(modifier):
    assert at(modifier) == datetime(2017, 1, 1, 8, 30, 15, tzinfo=UTC)


def test_unix_timestamp():
    assert at("@1511877910") == datetime(2017, 11, 28, 14, 5, 10, tzinfo=UTC)
    assert at("@0.5") == datetime(1970, 1, 1, 0, 0, 0, 500000, tzinfo=UTC)


def test_timestamp_in_base_zone():
    plus_one = timezone(timedelta(hours=1))
    result = at("@0", BASE.astimezone(plus_one))
    assert result.tzinfo == plus_one
    assert result.hour == 1


# ---- Relative offsets ----

def test_minutes_back():
    assert at("-8 minutes") == BASE - timedelta(minutes=8)
    assert at("8 minutes ago") == BASE - timedelta(minutes=8)


def test_ago_negates_every_previous_offset():
    assert at("2 days 3 hours ago") == BASE - timedelta(days=2, hours=3)


def test_double_negation():
    assert at("-8 minutes ago") == BASE + timedelta(minutes=8)


@pytest.mark.parametrize(
    "modifier, delta",
    [
        ("+1 day", timedelta(days=1)),
        ("+ 1 day", timedelta(days=1)),
        ("+1 week", timedelta(weeks=1)),
        ("+1 fortnight", timedelta(weeks=2)),
        ("+90 sec", timedelta(seconds=90)),
        ("+500 msec", timedelta(milliseconds=500)),
        ("+10 usec", timedelta(microseconds=10)),
        ("+1 hour +30 mins", timedelta(hours=1, minutes=30)),
        ("next week", timedelta(weeks=1)),
        ("this day", timedelta(0)),
    ],
)
def test_fixed_offsets(modifier, delta):
    assert at(modifier) == BASE + delta


def test_month_offset_clamps_to_month_end():
    end_of_january = datetime(2018, 1, 31, 9, tzinfo=UTC)
    assert at("+1 month", end_of_january) == datetime(2018, 2, 28, 9, tzinfo=UTC)


def test_last_year():
    assert at("last year") == BASE.replace(year=2016)


def test_time_is_set_before_hour_offsets():
    assert at("08:00 +2 hours") == datetime(2017, 11, 28, 10, tzinfo=UTC)


# ---- Weekdays ----

@pytest.mark.parametrize(
    "modifier, expected_day",
    [
        ("tuesday", 28),
        ("monday", 4),
        ("next monday", 4),
        ("next tuesday", 5),
        ("last monday", 27),
        ("previous tuesday", 21),
        ("fri", 1),
    ],
)
def test_weekdays(modifier, expected_day):
    result = at(modifier)
    assert result.day == expected_day
    assert (result.hour, result.minute, result.second) == (0, 0, 0)


def test_weekday_with_time():
    assert at("next monday 09:15") == datetime(2017, 12, 4, 9, 15, tzinfo=UTC)


# ---- First / last day of ----

def test_first_day_of_next_month():
    assert at("first day of next month") == BASE.replace(month=12, day=1)


def test_last_day_of_this_month():
    assert at("last day of this month") == BASE.replace(day=30)


def test_last_day_of_february_leap_year():
    base = datetime(2020, 1, 15, tzinfo=UTC)
    assert at("last day of +1 month midnight", base) == datetime(2020, 2, 29, tzinfo=UTC)


# ---- Zones ----

def test_wall_clock_arithmetic_keeps_zone():
    plus_two = timezone(timedelta(hours=2))
    base = datetime(2017, 11, 28, 22, tzinfo=plus_two)
    result = at("tomorrow 08:00", base)
    assert result == datetime(2017, 11, 29, 8, tzinfo=plus_two)
    assert result.tzinfo == plus_two


# ---- Rejections ----

@pytest.mark.parametrize(
    "modifier",
    [
        "banana",
        "tomorrow at",
        "25:00",
        "13pm",
        "2017-02-30",
        "08:00 09:00",
        "noon 08:00",
        "next",
        "next banana",
        "+3 parsecs",
        "monday tuesday",
        "2017-01-01 2018-01-01",
        "@99999999999999999999",
    ],
)
def test_rejected(modifier):
    with pytest.raises(InvalidModifierError) as exc_info:
        at(modifier)
    assert exc_info.value.modifier == modifier


def test_parse_modifier_is_reusable():
    modification = parse_modifier("+1 day")
    first = modification.apply(BASE)
    assert modification.apply(first) == BASE + timedelta(days=2)
