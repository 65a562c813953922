"""
Cache cleanup — the ``--clean`` half of several commands.

Image layers keep whatever a ``RUN`` step leaves behind, so caches are
removed in the same step that created them.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from dockprep.core.engine.runner import ProcessRunner

logger = logging.getLogger(__name__)


def remove_paths(runner: ProcessRunner, paths: Iterable[str | Path]) -> None:
    """``rm -rf`` each path; relative paths resolve against the runner's root.

    Echoed and skipped under dry-run like any other command.
    """
    for raw in paths:
        path = Path(raw)
        if not path.is_absolute():
            path = runner.root / path
        if runner.echo:
            runner.echo(f"rm -rf {path}")
        if runner.dry_run:
            continue
        logger.debug("Removing %s", path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)
