"""strictdate: strict date parsing and a freezable process clock."""

from strictdate.config import DateConfig, configure, get_config, reset_config
from strictdate.core.clock import (
    Clock,
    FreezableClock,
    SystemClock,
    TimeSource,
    at,
    freeze,
    frozen,
    get_default_clock,
    is_frozen,
    now,
    set_default_clock,
    unfreeze,
)
from strictdate.core.errors import (
    ConfigurationError,
    EmptyStackError,
    InvalidFormatError,
    InvalidModifierError,
    StrictDateError,
)
from strictdate.core.modifier import apply_modifier
from strictdate.core.parser import parse_optional, parse_strict
from strictdate.core.pattern import format_instant

__all__ = [
    "Clock",
    "ConfigurationError",
    "DateConfig",
    "EmptyStackError",
    "FreezableClock",
    "InvalidFormatError",
    "InvalidModifierError",
    "StrictDateError",
    "SystemClock",
    "TimeSource",
    "apply_modifier",
    "at",
    "configure",
    "format_instant",
    "freeze",
    "frozen",
    "get_config",
    "get_default_clock",
    "is_frozen",
    "now",
    "parse_optional",
    "parse_strict",
    "reset_config",
    "set_default_clock",
    "unfreeze",
]
