"""Shared CLI output helpers for bebopc.

Errors are reported through the ``bebopc`` logger so they follow the
``--log-format`` chosen on the commandline: one JSON line for
``structured``, ``bebopc: error: ...`` for ``msbuild``.

Usage::

    from bebopc.cli import error_exit, rel_display_path

    if not path.exists():
        error_exit(f"Schema file not found: {rel_display_path(path, Path.cwd())}")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer

from bebopc.log import ensure_logging

logger = logging.getLogger(__name__)


def error_exit(msg: str, *, help_text: str | None = None, code: int = 1) -> NoReturn:
    """Log *msg* as an error, echo the help text to stderr and ``raise typer.Exit(code)``."""
    ensure_logging()
    logger.error(msg)
    if help_text:
        typer.echo(help_text, err=True, nl=False)
    raise typer.Exit(code=code)


def rel_display_path(filepath: Path, base_dir: Path | None = None) -> str:
    """Return *filepath* relative to *base_dir* when it lies beneath it.

    Falls back to the path as given when it is elsewhere on disk.
    """
    if base_dir is not None:
        try:
            return str(filepath.relative_to(base_dir))
        except ValueError:
            pass
    return str(filepath)
