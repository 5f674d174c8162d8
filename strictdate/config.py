"""Runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timezone, tzinfo

from dateutil import tz

from strictdate.core.errors import ConfigurationError

TIMEZONE_ENV = "STRICTDATE_TIMEZONE"


@dataclass(frozen=True)
class DateConfig:
    timezone: str = "UTC"  # "UTC" | "local" | IANA name
    freeze_marker: str = "freeze_time"

    @classmethod
    def from_env(cls) -> DateConfig:
        value = os.environ.get(TIMEZONE_ENV)
        if value:
            return cls(timezone=value)
        return cls()

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)


def resolve_timezone(name: str | None) -> tzinfo:
    """Map a configured zone name to a tzinfo.

    ``None``, ``""`` and ``"UTC"`` give :data:`datetime.timezone.utc`,
    ``"local"`` gives the host zone, anything else is looked up in the
    IANA database.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc
    if name.lower() == "local":
        return tz.tzlocal()
    resolved = tz.gettz(name)
    if resolved is None:
        raise ConfigurationError(f"Unknown timezone: {name!r}")
    return resolved


_config = DateConfig.from_env()


def get_config() -> DateConfig:
    return _config


def configure(**overrides) -> DateConfig:
    """Replace fields of the process configuration and return the new one."""
    global _config
    updated = replace(_config, **overrides)
    resolve_timezone(updated.timezone)
    _config = updated
    return _config


def reset_config() -> DateConfig:
    """Restore configuration from the environment."""
    global _config
    _config = DateConfig.from_env()
    return _config
