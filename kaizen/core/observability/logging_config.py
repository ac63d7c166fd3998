"""
Logging setup for the ``kaizen`` CLI and server.

``kaizen.main.cli`` calls :func:`setup_logging` once per invocation;
modules log through ``logging.getLogger(__name__)``.

The console level comes from the first of:

    --debug (DEBUG), --verbose (INFO), --quiet (ERROR)
    KAIZEN_LOG_LEVEL
    WARNING

KAIZEN_LOG_FILE adds a file log at KAIZEN_LOG_FILE_LEVEL (or the
console level). Output goes to stderr so ``--json`` stdout stays clean.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "KAIZEN_LOG_LEVEL"
ENV_FILE = "KAIZEN_LOG_FILE"
ENV_FILE_LEVEL = "KAIZEN_LOG_FILE_LEVEL"

# Console format per level threshold, most detailed first
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# werkzeug logs one INFO line per request; urllib3 chatters on retries
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def level_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name for the CLI flags, falling back to KAIZEN_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """(Re)configure the root logger; previous handlers are replaced.

    Args:
        level: Console level name. Unknown names mean WARNING.
        log_file: Also log to this file.
        log_file_level: File level name (defaults to ``level``).
        quiet_third_party: Hold werkzeug/urllib3 at WARNING unless at DEBUG.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for limit, f, d in _CONSOLE_FORMATS if level <= limit)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
