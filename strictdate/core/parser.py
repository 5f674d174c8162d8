"""Strict parsing of formatted date strings into instants."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from strictdate.config import get_config
from strictdate.core.clock import Clock, get_default_clock
from strictdate.core.errors import InvalidFormatError
from strictdate.core.pattern import build_instant, compile_pattern, format_instant

logger = logging.getLogger(__name__)


def parse_strict(value: str, pattern: str, *, zone: tzinfo | None = None) -> datetime:
    """Parse ``value`` against ``pattern``, rejecting anything not exact.

    Trailing or missing characters, out-of-range fields (``"2017-01-35"``
    under ``"%Y-%m-%d"``) and fields that contradict each other all raise
    :class:`InvalidFormatError`. Fields the pattern does not mention are
    taken from 1970-01-01 00:00:00, never from the current time, so
    ``parse_strict("2017-11", "%Y-%m")`` is 2017-11-01 at midnight.

    The result is in the zone parsed by ``%z``/``%Z`` when present, else in
    ``zone``, else in the configured default timezone.
    """
    if not isinstance(value, str) or not value:
        raise InvalidFormatError(value, pattern)
    try:
        fields = compile_pattern(pattern).match_fields(value)
        if fields is None:
            raise InvalidFormatError(value, pattern)
        return build_instant(fields, zone or get_config().tzinfo)
    except InvalidFormatError:
        logger.debug("Rejected %r for pattern %r", value, pattern)
        raise
    except (ValueError, OverflowError) as exc:
        logger.debug("Rejected %r for pattern %r: %s", value, pattern, exc)
        raise InvalidFormatError(value, pattern) from exc


def parse_optional(
    value: str | None,
    pattern: str,
    *,
    clock: Clock | None = None,
    zone: tzinfo | None = None,
) -> datetime:
    """Like :func:`parse_strict`, but ``None`` or ``""`` means "now".

    The current instant of ``clock`` (the process clock by default) is
    formatted under ``pattern`` and parsed back, so the result is "now"
    truncated to the pattern's granularity: ``"%Y-%m"`` gives the first day
    of the current month at midnight.
    """
    if not value:
        current = (clock or get_default_clock()).now()
        if zone is not None:
            current = current.astimezone(zone)
        try:
            value = format_instant(current, pattern)
        except ValueError as exc:
            raise InvalidFormatError(value, pattern) from exc
        zone = current.tzinfo
    return parse_strict(value, pattern, zone=zone)
