"""Core building blocks: clock, patterns, modifiers, parsing, errors."""
