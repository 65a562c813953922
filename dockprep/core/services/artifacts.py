"""
Artifact relocation — ``transmute-to-artifacts``.

Moves build outputs into a shadow tree (``/artifacts/usr/local/bundle``
for ``/usr/local/bundle``) and leaves a symlink behind. A later stage
copies the artifacts root in one step instead of naming every path.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from dockprep.core.errors import ArtifactError

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACTS_DIR = "/artifacts"


@dataclass
class Relocation:
    """One completed move."""

    source: Path
    target: Path


def artifact_target(path: Path, artifacts_dir: Path) -> Path:
    """Location of absolute ``path`` inside ``artifacts_dir``."""
    return artifacts_dir / path.relative_to(path.anchor)


def transmute_to_artifacts(
    paths: Iterable[str | Path],
    artifacts_dir: str | Path = DEFAULT_ARTIFACTS_DIR,
    cwd: Path | None = None,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> list[Relocation]:
    """Move each path under ``artifacts_dir`` and symlink it back.

    Paths are made absolute against ``cwd`` without resolving symlinks,
    so the link replaces exactly the path that was named.

    Raises:
        ArtifactError: If a source is missing, or the move or link fails.
            Nothing is rolled back; a moved path without a link is named
            in the message.
    """
    cwd = cwd or Path.cwd()
    root = Path(os.path.abspath(cwd / Path(artifacts_dir)))
    done: list[Relocation] = []

    for raw in paths:
        source = Path(os.path.abspath(cwd / Path(raw)))
        target = artifact_target(source, root)

        if echo:
            echo(f"mv {source} {target} && ln -s {target} {source}")
        if dry_run:
            continue

        if not source.exists() and not source.is_symlink():
            raise ArtifactError(f"Cannot relocate {source}: no such file or directory")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise ArtifactError(f"Cannot move {source} to {target}: {e}") from e

        try:
            source.symlink_to(target)
        except OSError as e:
            raise ArtifactError(
                f"Moved {source} to {target} but could not link it back: {e}"
            ) from e

        logger.info("Relocated %s → %s", source, target)
        done.append(Relocation(source=source, target=target))

    return done
