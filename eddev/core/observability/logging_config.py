"""
Logging configuration — set up once by the CLI entrypoint.

Modules log through ``logging.getLogger(__name__)``. Output of the wrapped
tools (ddev, composer, git) goes to the ``eddev.tools`` logger at DEBUG,
so ``--debug`` shows everything the tools printed while the default
level only shows warnings.

Level precedence:
    --debug / --verbose / --quiet  >  EDDEV_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import sys

TOOL_LOGGER = "eddev.tools"

# level threshold -> (format, datefmt); first threshold >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_FMT_MINIMAL = "%(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console log level from CLI flags and EDDEV_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure logging for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file; always written with full detail.
        log_file_level: Level for the log file (defaults to ``level``).
    """
    numeric_level = _parse_level(level)

    fmt, datefmt = _FMT_MINIMAL, None
    for threshold, candidate_fmt, candidate_datefmt in _CONSOLE_FORMATS:
        if numeric_level <= threshold:
            fmt, datefmt = candidate_fmt, candidate_datefmt
            break

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
