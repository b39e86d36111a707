"""Merge parsed flags with bebop.json into one resolved compiler invocation.

Commandline values win over the config file:

* ``--cs/--ts/--dart`` replace a configured generator with the same alias.
* ``--files`` and ``--dir`` replace the configured inputs entirely.
* ``--namespace`` applies to every generator.
* ``--check`` ignores generators and only lists the files to validate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from bebopc.config import BebopConfig, GeneratorConfig
from bebopc.errors import InvocationError
from bebopc.flags import CommandLineFlags

logger = logging.getLogger(__name__)

SCHEMA_EXT = ".bop"


@dataclass
class CompilerInvocation:
    schema_files: list[Path]
    generators: list[GeneratorConfig] = field(default_factory=list)
    check_only: bool = False
    config_path: Path | None = None


def iter_schemas(directory: Path) -> list[Path]:
    """Return all schema files under *directory*, recursively, sorted by path."""
    return sorted(directory.rglob(f"*{SCHEMA_EXT}"))


def _dedupe(paths: list[Path]) -> list[Path]:
    seen: set[Path] = set()
    unique: list[Path] = []
    for p in paths:
        key = p.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(p)
    return unique


def _schema_inputs(
    flags: CommandLineFlags, config: BebopConfig | None, cwd: Path
) -> list[Path]:
    if flags.schema_files or flags.schema_directory:
        files = [cwd / f for f in flags.schema_files or []]
        if flags.schema_directory:
            directory = cwd / flags.schema_directory
            if not directory.is_dir():
                raise InvocationError(f"Schema directory not found: {flags.schema_directory}")
            files.extend(iter_schemas(directory))
        return files

    if config is None:
        return []
    files = list(config.input_files)
    if config.input_directory is not None:
        if not config.input_directory.is_dir():
            raise InvocationError(f"Schema directory not found: {config.input_directory}")
        files.extend(iter_schemas(config.input_directory))
    excluded = {p.resolve() for p in config.exclude}
    return [f for f in files if f.resolve() not in excluded]


def _generators(
    flags: CommandLineFlags, config: BebopConfig | None, cwd: Path
) -> list[GeneratorConfig]:
    by_alias: dict[str, GeneratorConfig] = {}
    if config is not None:
        by_alias = {g.alias: g for g in config.generators}
    for alias, out_file in flags.get_parsed_generators():
        configured = by_alias.get(alias)
        by_alias[alias] = GeneratorConfig(
            alias=alias,
            out_file=cwd / out_file,
            namespace=configured.namespace if configured is not None else None,
        )
    generators = list(by_alias.values())
    if flags.namespace:
        for gen in generators:
            gen.namespace = flags.namespace
    return generators


def build_invocation(
    flags: CommandLineFlags,
    config: BebopConfig | None = None,
    cwd: Path | None = None,
    config_path: Path | None = None,
) -> CompilerInvocation:
    """Resolve *flags* and *config* against *cwd* (default: current directory)."""
    cwd = cwd if cwd is not None else Path.cwd()

    if flags.check_schema_files:
        schema_files = [cwd / f for f in flags.check_schema_files]
        generators: list[GeneratorConfig] = []
        check_only = True
    else:
        schema_files = _schema_inputs(flags, config, cwd)
        generators = _generators(flags, config, cwd)
        check_only = False

    schema_files = _dedupe(schema_files)
    if not schema_files:
        raise InvocationError("No schema files were given; use --files, --dir, or bebop.json.")
    missing = [p for p in schema_files if not p.is_file()]
    if missing:
        raise InvocationError(f"Schema file not found: {missing[0]}")
    if not check_only and not generators:
        logger.warning("No code generators selected; schemas will only be parsed")

    return CompilerInvocation(
        schema_files=schema_files,
        generators=generators,
        check_only=check_only,
        config_path=config_path,
    )
