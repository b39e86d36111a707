"""Error types raised while parsing commandline flags and loading bebop.json.

Every parse failure is a :class:`FlagError`.  The parser raises them
internally; :func:`bebopc.flags.try_parse` turns the first one into a value
so that callers only ever deal with a result object and a message.
"""

from __future__ import annotations

from enum import Enum


class FlagError(ValueError):
    """Base class for all commandline flag parse failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoFlagsFoundError(FlagError):
    def __init__(self) -> None:
        super().__init__("No commandline flags found.")


class DuplicateFlagError(FlagError):
    def __init__(self, flag_name: str) -> None:
        super().__init__(f"Commandline flag '{flag_name}' was specified more than once.")
        self.flag_name = flag_name


class MissingValueError(FlagError):
    def __init__(self, flag_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Commandline flag '{flag_name}' was not assigned a value.")
        self.flag_name = flag_name


class ListConstructionError(MissingValueError):
    """A list flag produced no items.

    Subclasses :class:`MissingValueError` because an empty list flag is also
    a flag without a value.
    """

    def __init__(self, flag_name: str) -> None:
        super().__init__(
            flag_name,
            f"Commandline flag '{flag_name}' requires at least one value.",
        )


class InvalidEnumValueError(FlagError):
    def __init__(self, value: str, enum_type: type[Enum]) -> None:
        choices = "|".join(member.name.lower() for member in enum_type)
        super().__init__(
            f"Failed to parse '{value}' into a member of '{enum_type.__name__}' ({choices})."
        )
        self.value = value
        self.enum_type = enum_type


class ConfigError(ValueError):
    """Raised when bebop.json exists but cannot be understood."""


class InvocationError(ValueError):
    """Raised when parsed flags and config do not describe a runnable compile."""
