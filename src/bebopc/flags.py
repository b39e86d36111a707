"""Commandline flag table and parser for bebopc.

Every recognised flag is declared once in :data:`FLAG_DESCRIPTORS`.  The help
text, the coercion loop and the generator lookup all read that table, so
adding a flag means adding one :class:`FlagDescriptor` and one attribute on
:class:`CommandLineFlags`.

Usage::

    from bebopc.flags import try_parse

    result = try_parse(sys.argv[1:])
    if result.error is not None:
        print(result.error_message, result.help_text, file=sys.stderr)
    elif result.flags.help:
        print(result.help_text)
    else:
        for alias, out_file in result.flags.get_parsed_generators():
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, fields
from enum import Enum
from typing import cast

from bebopc.errors import (
    DuplicateFlagError,
    FlagError,
    InvalidEnumValueError,
    ListConstructionError,
    MissingValueError,
    NoFlagsFoundError,
)
from bebopc.log import LogFormatter

logger = logging.getLogger(__name__)

COMPILER_NAME = "bebopc"
FLAG_PREFIX = "--"


class ValueKind(Enum):
    BOOL = "bool"
    STRING = "string"
    STRING_LIST = "string_list"
    ENUM = "enum"


@dataclass(frozen=True)
class FlagDescriptor:
    """Static metadata for one commandline flag.

    ``field`` names the :class:`CommandLineFlags` attribute that receives the
    coerced value.  Flag names use hyphens for compound words
    (``log-format``), never camel case.
    """

    name: str
    help_text: str
    kind: ValueKind
    field: str
    usage_example: str = ""
    is_generator_flag: bool = False
    enum_type: type[Enum] | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Flag name must not be empty")
        if not self.help_text or not self.help_text.strip():
            raise ValueError(f"Flag '{self.name}' needs help text")
        if (self.kind is ValueKind.ENUM) != (self.enum_type is not None):
            raise ValueError(f"Flag '{self.name}': enum_type is required for and only for ENUM flags")
        if self.is_generator_flag and self.kind is not ValueKind.STRING:
            raise ValueError(f"Generator flag '{self.name}' must take a single path")


FLAG_DESCRIPTORS: tuple[FlagDescriptor, ...] = (
    FlagDescriptor(
        "config",
        "Initializes the compiler from the specified configuration file.",
        ValueKind.STRING,
        "config_file",
        usage_example="--config bebop.json",
    ),
    FlagDescriptor(
        "cs",
        "Generate C# source code to the specified file",
        ValueKind.STRING,
        "csharp_output",
        usage_example="--cs ./cowboy/bebop/HelloWorld.cs",
        is_generator_flag=True,
    ),
    FlagDescriptor(
        "ts",
        "Generate TypeScript source code to the specified file",
        ValueKind.STRING,
        "typescript_output",
        usage_example="--ts ./cowboy/bebop/HelloWorld.ts",
        is_generator_flag=True,
    ),
    FlagDescriptor(
        "dart",
        "Generate Dart source code to the specified file",
        ValueKind.STRING,
        "dart_output",
        usage_example="--dart ./cowboy/bebop/HelloWorld.dart",
        is_generator_flag=True,
    ),
    FlagDescriptor(
        "namespace",
        "When this option is specified generated code will use namespaces",
        ValueKind.STRING,
        "namespace",
        usage_example="--cs ./HelloWorld.cs --namespace [package]",
    ),
    FlagDescriptor(
        "dir",
        "Parse and generate code from a directory of schemas",
        ValueKind.STRING,
        "schema_directory",
        usage_example="--ts ./HelloWorld.ts --dir [input dir]",
    ),
    FlagDescriptor(
        "files",
        "Parse and generate code from a list of schemas",
        ValueKind.STRING_LIST,
        "schema_files",
        usage_example="--files [file1] [file2] ...",
    ),
    FlagDescriptor(
        "check",
        "Only check a given schema is valid",
        ValueKind.STRING_LIST,
        "check_schema_files",
        usage_example="--check [file.bop] [file2.bop] ...",
    ),
    FlagDescriptor(
        "version",
        "Show version info and exit.",
        ValueKind.BOOL,
        "version",
        usage_example="--version",
    ),
    FlagDescriptor(
        "help",
        "Show this text and exit.",
        ValueKind.BOOL,
        "help",
        usage_example="--help",
    ),
    FlagDescriptor(
        "log-format",
        "Defines the formatter that will be used with logging.",
        ValueKind.ENUM,
        "log_formatter",
        usage_example="--log-format (structured|msbuild)",
        enum_type=LogFormatter,
    ),
)

_DESCRIPTORS_BY_NAME: dict[str, FlagDescriptor] = {d.name.lower(): d for d in FLAG_DESCRIPTORS}
if len(_DESCRIPTORS_BY_NAME) != len(FLAG_DESCRIPTORS):
    raise RuntimeError("Duplicate flag names in FLAG_DESCRIPTORS")


# ---------------------------------------------------------------------------
# Parsed flag store
# ---------------------------------------------------------------------------


@dataclass
class CommandLineFlags:
    """Typed values of every flag in :data:`FLAG_DESCRIPTORS`.

    Instances are only built by :func:`parse_flags`; treat them as read-only
    once returned.
    """

    help_text: str
    config_file: str | None = None
    csharp_output: str | None = None
    typescript_output: str | None = None
    dart_output: str | None = None
    namespace: str | None = None
    schema_directory: str | None = None
    schema_files: list[str] | None = None
    check_schema_files: list[str] | None = None
    # Output the product version and exit with a zero return code.
    version: bool = False
    # Output help_text and exit with a zero return code.
    help: bool = False
    log_formatter: LogFormatter = LogFormatter.STRUCTURED

    def get_parsed_generators(self) -> Iterator[tuple[str, str]]:
        """Yield ``(alias, output_file)`` for every generator flag that was given."""
        for descriptor in FLAG_DESCRIPTORS:
            if not descriptor.is_generator_flag:
                continue
            value = getattr(self, descriptor.field)
            if isinstance(value, str):
                yield descriptor.name, value


_STORE_FIELDS = {f.name for f in fields(CommandLineFlags)}
for _descriptor in FLAG_DESCRIPTORS:
    if _descriptor.field not in _STORE_FIELDS:
        raise RuntimeError(f"Flag '{_descriptor.name}' targets unknown field '{_descriptor.field}'")


@dataclass
class ParseResult:
    """Outcome of :func:`try_parse`.  ``flags`` is ``None`` whenever ``error`` is set."""

    help_text: str
    flags: CommandLineFlags | None = None
    error: FlagError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        return self.error.message if self.error is not None else ""


# ---------------------------------------------------------------------------
# Help text
# ---------------------------------------------------------------------------


def render_help_text(
    descriptors: Sequence[FlagDescriptor] = FLAG_DESCRIPTORS,
    compiler_name: str = COMPILER_NAME,
) -> str:
    """Render the "Usage" and "Options" blocks shown by ``--help``."""
    indent = " " * 4
    lines = ["Usage:"]
    lines.extend(
        f"{indent}{compiler_name} {d.usage_example}"
        for d in descriptors
        if d.usage_example.strip()
    )
    lines.extend(["", "", "Options:"])
    lines.extend(f"{indent}{FLAG_PREFIX}{d.name}  {d.help_text}" for d in descriptors)
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def tokenize(args: Sequence[str]) -> dict[str, str]:
    """Group raw arguments into ``{flag: value}``.

    A flag's value is every following token up to the next ``--`` token,
    joined with single spaces (``""`` when there are none).  Tokens before
    the first flag are ignored.  Keys are lower-cased with all leading
    hyphens removed.
    """
    flags: dict[str, str] = {}
    key: str | None = None
    values: list[str] = []

    def _commit() -> None:
        if key is None:
            return
        if key in flags:
            raise DuplicateFlagError(key)
        flags[key] = " ".join(values)

    for token in args:
        if token.startswith(FLAG_PREFIX):
            _commit()
            key = token.lstrip("-").lower()
            values = []
        elif key is not None:
            values.append(token)
    _commit()
    return flags


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _match_enum(enum_type: type[Enum], value: str) -> Enum | None:
    wanted = value.lower()
    for member in enum_type:
        if member.name.lower() == wanted or str(member.value).lower() == wanted:
            return member
    return None


def coerce(descriptor: FlagDescriptor, raw: str, store: CommandLineFlags) -> None:
    """Convert *raw* per ``descriptor.kind`` and store it on *store*."""
    kind = descriptor.kind
    if kind is ValueKind.BOOL:
        value: object = True
    else:
        text = raw.strip()
        if kind is ValueKind.STRING_LIST:
            items = text.split()
            if not items:
                raise ListConstructionError(descriptor.name)
            value = items
        elif not text:
            raise MissingValueError(descriptor.name)
        elif kind is ValueKind.ENUM:
            enum_type = cast("type[Enum]", descriptor.enum_type)
            value = _match_enum(enum_type, text)
            if value is None:
                raise InvalidEnumValueError(text, enum_type)
        else:
            value = text
    setattr(store, descriptor.field, value)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_flags(args: Sequence[str]) -> CommandLineFlags:
    """Parse *args* into a :class:`CommandLineFlags`, raising :class:`FlagError`."""
    store = CommandLineFlags(help_text=render_help_text())
    raw_flags = tokenize(args)
    if not raw_flags:
        raise NoFlagsFoundError()

    # help and version win before any other flag is validated
    if "help" in raw_flags:
        store.help = True
        return store
    if "version" in raw_flags:
        store.version = True
        return store

    for name in raw_flags:
        if name not in _DESCRIPTORS_BY_NAME:
            logger.warning("Ignoring unrecognised commandline flag '%s%s'", FLAG_PREFIX, name)

    for descriptor in FLAG_DESCRIPTORS:
        raw = raw_flags.get(descriptor.name)
        if raw is None:
            continue
        coerce(descriptor, raw, store)
    return store


def try_parse(args: Sequence[str]) -> ParseResult:
    """Parse *args*, returning the first failure as a value instead of raising."""
    help_text = render_help_text()
    try:
        flags = parse_flags(args)
    except FlagError as exc:
        logger.debug("Commandline parse failed: %s", exc.message)
        return ParseResult(help_text=help_text, error=exc)
    return ParseResult(help_text=help_text, flags=flags)


def find_log_formatter(args: Sequence[str]) -> LogFormatter:
    """Return the ``--log-format`` value, or the default when absent or invalid.

    Runs before the full parse so that parse errors can be reported with the
    formatter the user asked for.
    """
    try:
        raw_flags = tokenize(args)
    except FlagError:
        return LogFormatter.STRUCTURED
    raw = raw_flags.get("log-format", "").strip()
    member = _match_enum(LogFormatter, raw) if raw else None
    return member if isinstance(member, LogFormatter) else LogFormatter.STRUCTURED
