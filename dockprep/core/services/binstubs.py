"""
Binstub normalization.

Binstubs generated on a developer machine may carry an absolute Ruby
path (``#!/Users/me/.rbenv/versions/3.3.0/bin/ruby``), Windows line
endings, or lost execute bits. Each script under ``bin/`` is rewritten
to ``#!/usr/bin/env ruby`` with LF endings and mode ``0755 & ~umask``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

SHEBANG = b"#!"
EXECUTABLE_MODE = 0o755


def ruby_command_name(environ: Mapping[str, str] | None = None) -> str:
    """Name to put after ``/usr/bin/env``: ``$RUBY``'s basename or ``ruby``."""
    environ = os.environ if environ is None else environ
    ruby = environ.get("RUBY", "").strip()
    return os.path.basename(ruby) if ruby else "ruby"


def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def normalize_binstub(path: Path, ruby: str = "ruby") -> bool:
    """Normalize one script in place; returns whether it was rewritten.

    Files not starting with ``#!`` are left byte-for-byte alone. The
    whole file is read before the single truncate-and-write, so a crash
    can only lose the write, not mix old and new content.
    """
    with path.open("r+b") as f:
        if f.read(2) != SHEBANG:
            return False

        first_line = f.readline()
        shebang = SHEBANG + first_line.rstrip(b"\r\n")
        if b"ruby" in shebang:
            shebang = b"#!/usr/bin/env " + ruby.encode()

        content = f.read().replace(b"\r", b"")
        newline = b"\n" if first_line.endswith(b"\n") else b""

        f.seek(0)
        f.write(shebang + newline + content)
        f.truncate()

    path.chmod(EXECUTABLE_MODE & ~current_umask())
    logger.debug("Normalized %s (%s)", path, shebang.decode(errors="replace"))
    return True


def normalize_binstubs(bin_dir: Path, ruby: str | None = None) -> list[Path]:
    """Normalize every regular file under ``bin_dir`` (recursively)."""
    if not bin_dir.is_dir():
        logger.info("No %s directory, nothing to normalize", bin_dir)
        return []

    ruby = ruby or ruby_command_name()
    normalized = []
    for path in sorted(bin_dir.rglob("*")):
        if path.is_file() and normalize_binstub(path, ruby=ruby):
            normalized.append(path)
    return normalized
