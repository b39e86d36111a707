"""Diagnostic formatters selected by ``--log-format``.

Two output styles are supported:

* ``structured`` - one JSON object per line, for editors and tooling::

      {"severity": "error", "logger": "bebopc.main", "message": "...", "file": "a.bop", "line": 3, "column": 1}

* ``msbuild`` - the canonical MSBuild/Visual Studio error format so that IDE
  build output panes can link diagnostics to source::

      a.bop(3,1): error: ...

A log call attaches a source location through ``extra``::

    logger.error("Unknown type", extra={"file": path, "line": 3, "column": 1})
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import IO, Any

ROOT_LOGGER = "bebopc"


class LogFormatter(Enum):
    STRUCTURED = "structured"
    MSBUILD = "msbuild"


def _location(record: logging.LogRecord) -> tuple[str | None, int | None, int | None]:
    return (
        getattr(record, "file", None),
        getattr(record, "line", None),
        getattr(record, "column", None),
    )


def _severity(record: logging.LogRecord) -> str:
    if record.levelno >= logging.ERROR:
        return "error"
    if record.levelno >= logging.WARNING:
        return "warning"
    return "info"


class StructuredFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "severity": _severity(record),
            "logger": record.name,
            "message": record.getMessage(),
        }
        file, line, column = _location(record)
        if file is not None:
            payload["file"] = str(file)
            if line is not None:
                payload["line"] = line
            if column is not None:
                payload["column"] = column
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class MSBuildFormatter(logging.Formatter):
    """Render records as ``origin: category: message``."""

    def format(self, record: logging.LogRecord) -> str:
        file, line, column = _location(record)
        if file is None:
            origin = ROOT_LOGGER
        elif line is None:
            origin = str(file)
        else:
            origin = f"{file}({line},{column if column is not None else 1})"
        text = f"{origin}: {_severity(record)}: {record.getMessage()}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


_FORMATTERS: dict[LogFormatter, type[logging.Formatter]] = {
    LogFormatter.STRUCTURED: StructuredFormatter,
    LogFormatter.MSBUILD: MSBuildFormatter,
}


def make_formatter(formatter: LogFormatter) -> logging.Formatter:
    return _FORMATTERS[formatter]()


class DiagnosticHandler(logging.StreamHandler):
    """Stream handler owned by :func:`configure_logging`."""


def configure_logging(
    formatter: LogFormatter,
    stream: IO[str] | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Install a single stream handler on the ``bebopc`` logger.

    Calling this again replaces the handler installed by a previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, DiagnosticHandler):
            logger.removeHandler(handler)
    handler = DiagnosticHandler(stream)
    handler.setFormatter(make_formatter(formatter))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def ensure_logging() -> logging.Logger:
    """Return the ``bebopc`` logger, installing the default formatter if none is set."""
    logger = logging.getLogger(ROOT_LOGGER)
    if any(isinstance(h, DiagnosticHandler) for h in logger.handlers):
        return logger
    return configure_logging(LogFormatter.STRUCTURED)
