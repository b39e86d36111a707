"""main.py – ``bebopc`` entry point.

Typer only provides the process plumbing here: its own option parsing and
``--help`` are switched off and the raw arguments go to
:func:`bebopc.flags.try_parse`, which owns the flag table and help text.

Exit codes: ``0`` for ``--help``, ``--version`` and a resolved invocation;
``1`` for flag, config or input errors.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from bebopc import __version__
from bebopc.cli import error_exit, rel_display_path
from bebopc.config import find_bebop_config, load_config
from bebopc.errors import ConfigError, InvocationError
from bebopc.flags import COMPILER_NAME, find_log_formatter, try_parse
from bebopc.invocation import CompilerInvocation, build_invocation
from bebopc.log import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)

_console = Console()


def _print_plan(invocation: CompilerInvocation, cwd: Path) -> None:
    title = "bebopc check" if invocation.check_only else "bebopc plan"
    table = Table(title=title)
    table.add_column("Kind", style="cyan")
    table.add_column("Path")
    table.add_column("Namespace", style="dim")
    for schema in invocation.schema_files:
        table.add_row("schema", rel_display_path(schema, cwd), "")
    for gen in invocation.generators:
        table.add_row(gen.alias, rel_display_path(gen.out_file, cwd), gen.namespace or "")
    _console.print(table)


@app.command(
    add_help_option=False,
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    },
)
def run(ctx: typer.Context) -> None:
    """Parse bebopc flags and resolve the compiler invocation."""
    args = list(ctx.args)
    configure_logging(find_log_formatter(args))

    result = try_parse(args)
    if result.flags is None:
        error_exit(result.error_message, help_text=result.help_text)
    flags = result.flags

    if flags.help:
        typer.echo(result.help_text, nl=False)
        raise typer.Exit(code=0)
    if flags.version:
        typer.echo(f"{COMPILER_NAME} {__version__}")
        raise typer.Exit(code=0)

    cwd = Path.cwd()
    config_path = Path(flags.config_file) if flags.config_file else find_bebop_config(cwd)
    config = None
    if config_path is not None:
        logger.info("Using configuration file %s", config_path)
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ConfigError) as exc:
            error_exit(str(exc))

    try:
        invocation = build_invocation(flags, config, cwd=cwd, config_path=config_path)
    except InvocationError as exc:
        error_exit(str(exc))

    _print_plan(invocation, cwd)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
