"""
Logging configuration — central setup for the CLI and drivers.

Called once at startup.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  BUILDPLANE_LOG_LEVEL env var  >  WARNING (default)

Optional file output via BUILDPLANE_LOG_FILE / BUILDPLANE_LOG_FILE_LEVEL.

Remote URLs may carry ``user:token@`` credentials, and git echoes them
back in its error output.  Every handler installed here formats through
``RedactingFormatter``, so no log line ever shows them.
"""

from __future__ import annotations

import logging
import os
import re
import sys

# WARNING level — just the message
_FMT_MINIMAL = "%(message)s"

# INFO level — progress lines ("Cloning Git repo …") with time and source
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG level and file output — full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_USERINFO_RE = re.compile(r"(\w[\w+.-]*://)[^/@\s]+@")


def scrub_credentials(text: str) -> str:
    """Remove ``user:password@`` from any URL embedded in *text*."""
    return _USERINFO_RE.sub(r"\1", text)


class RedactingFormatter(logging.Formatter):
    """Formatter that strips URL credentials from the rendered record."""

    def format(self, record: logging.LogRecord) -> str:
        return scrub_credentials(super().format(record))


def level_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick a level name from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("BUILDPLANE_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file (always DEBUG format).
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(RedactingFormatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
        handlers.append(fh)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # Root must let through whatever the most verbose handler wants
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    if level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_CONSOLE
    elif level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_CONSOLE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(RedactingFormatter(fmt, datefmt=datefmt))
    return console


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
