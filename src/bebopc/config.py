"""Project configuration for bebopc.

A project may carry a ``bebop.json`` next to its schemas.  It is located
the way ``git`` locates ``.git/``: starting at the current working directory
and walking up through every parent until the filesystem root.

Example ``bebop.json``::

    {
        "inputDirectory": "./schemas",
        "inputFiles": ["./extra/common.bop"],
        "exclude": ["./schemas/legacy.bop"],
        "generators": [
            {"alias": "cs", "outFile": "./gen/Models.g.cs", "namespace": "Acme.Models"},
            {"alias": "ts", "outFile": "./gen/models.ts"}
        ]
    }

Usage::

    from bebopc.config import find_bebop_config, load_config

    path = find_bebop_config()
    if path is not None:
        cfg = load_config(path)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bebopc.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "bebop.json"

# Aliases accepted in the "generators" array; they match the generator flags.
GENERATOR_ALIASES = ("cs", "ts", "dart")


@dataclass
class GeneratorConfig:
    alias: str
    out_file: Path
    namespace: str | None = None


@dataclass
class BebopConfig:
    """Parsed ``bebop.json`` with paths resolved against its directory."""

    # Directory that holds bebop.json
    root: Path
    input_directory: Path | None = None
    input_files: list[Path] = field(default_factory=list)
    exclude: list[Path] = field(default_factory=list)
    generators: list[GeneratorConfig] = field(default_factory=list)


def find_bebop_config(start: Path | None = None) -> Path | None:
    """Search *start* (or cwd) and each of its parents for ``bebop.json``.

    Returns the fully qualified path to the file, or ``None`` once the
    filesystem root has been checked without a match.
    """
    candidate = (start if start is not None else Path.cwd()).resolve()
    for directory in (candidate, *candidate.parents):
        config_path = directory / CONFIG_FILE_NAME
        if config_path.is_file():
            logger.debug("Found %s at %s", CONFIG_FILE_NAME, config_path)
            return config_path
    return None


def _resolve(root: Path, rel: str) -> Path:
    """Resolve a path relative to the config directory."""
    p = Path(rel)
    if p.is_absolute():
        return p
    return root / p


def _expect_str(raw: dict[str, Any], key: str, where: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}: '{key}' must be a non-empty string")
    return value


def _expect_str_list(raw: dict[str, Any], key: str, where: str) -> list[str]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: '{key}' must be a list of strings")
    return value


def _parse_generator(root: Path, raw: object, index: int, where: str) -> GeneratorConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: generators[{index}] must be an object")
    alias = _expect_str(raw, "alias", f"{where}: generators[{index}]")
    out_file = _expect_str(raw, "outFile", f"{where}: generators[{index}]")
    if alias is None or out_file is None:
        raise ConfigError(f"{where}: generators[{index}] needs both 'alias' and 'outFile'")
    alias = alias.lower()
    if alias not in GENERATOR_ALIASES:
        raise ConfigError(
            f"{where}: unknown generator alias '{alias}' "
            f"(expected one of {', '.join(GENERATOR_ALIASES)})"
        )
    return GeneratorConfig(
        alias=alias,
        out_file=_resolve(root, out_file),
        namespace=_expect_str(raw, "namespace", f"{where}: generators[{index}]"),
    )


def load_config(path: Path) -> BebopConfig:
    """Load and validate a ``bebop.json`` file.

    Raises:
        FileNotFoundError: *path* does not exist.
        ConfigError: the file is not valid JSON or has the wrong shape.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config not found: {path}")
    root = path.resolve().parent
    where = str(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{where}: invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: top level must be an object")

    input_directory = _expect_str(raw, "inputDirectory", where)
    generators_raw = raw.get("generators", [])
    if not isinstance(generators_raw, list):
        raise ConfigError(f"{where}: 'generators' must be a list")

    generators = [_parse_generator(root, g, i, where) for i, g in enumerate(generators_raw)]
    seen: set[str] = set()
    for gen in generators:
        if gen.alias in seen:
            raise ConfigError(f"{where}: generator '{gen.alias}' is configured more than once")
        seen.add(gen.alias)

    return BebopConfig(
        root=root,
        input_directory=_resolve(root, input_directory) if input_directory else None,
        input_files=[_resolve(root, f) for f in _expect_str_list(raw, "inputFiles", where)],
        exclude=[_resolve(root, f) for f in _expect_str_list(raw, "exclude", where)],
        generators=generators,
    )
