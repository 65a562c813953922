"""
Logging configuration — set up once by the CLI before any command runs.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
this config. Output goes to stderr so it interleaves with the package
managers' own output in the image build log.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  DOCKPREP_LOG_LEVEL  >  WARNING

DOCKPREP_LOG_FILE adds a file handler (level DOCKPREP_LOG_FILE_LEVEL,
defaulting to the console level), useful when the build log is
truncated by the builder.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

# ── Format strings ──────────────────────────────────────────────

# Build logs already carry timestamps; keep the console terse.
_FMT_CONSOLE = "dockprep: %(message)s"
_FMT_DEBUG = "dockprep: %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

ENV_LEVEL = "DOCKPREP_LOG_LEVEL"
ENV_FILE = "DOCKPREP_LOG_FILE"
ENV_FILE_LEVEL = "DOCKPREP_LOG_FILE_LEVEL"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    environ = os.environ if environ is None else environ
    return environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Separate level for the file; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    fmt = _FMT_DEBUG if numeric_level <= logging.DEBUG else _FMT_CONSOLE
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt))

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


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value, WARNING if unknown."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
