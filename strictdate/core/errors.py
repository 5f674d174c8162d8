"""Exception hierarchy for strictdate."""

from __future__ import annotations


class StrictDateError(Exception):
    """Library base exception."""


class InvalidFormatError(StrictDateError, ValueError):
    """Input does not strictly comply with the expected format pattern."""

    def __init__(self, value: str | None, pattern: str) -> None:
        self.value = value
        self.pattern = pattern
        super().__init__(
            f'Date must comply with format "{pattern}" but "{value}" given.'
        )


class InvalidModifierError(StrictDateError, ValueError):
    """Modifier expression could not be understood."""

    def __init__(self, modifier: str, reason: str = "") -> None:
        self.modifier = modifier
        message = f"Invalid date modifier: {modifier!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyStackError(StrictDateError, RuntimeError):
    """Unfreeze requested while no instant is frozen."""

    def __init__(self) -> None:
        super().__init__(
            "Can't pop frozen time from empty stack. "
            "Maybe one too many calls to `unfreeze()`?"
        )


class ConfigurationError(StrictDateError):
    """Invalid runtime configuration."""
