"""
Node module installation — ``install-node-modules``.

Exactly one lock file is authoritative, picked by fixed priority. Every
package manager runs in its frozen/CI mode so the lock file is never
rewritten during an image build.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dockprep.core.config.loader import find_manifest
from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.errors import ConfigError
from dockprep.core.models.toolchain import LockfileKind

logger = logging.getLogger(__name__)

MISSING_LOCKFILE_MESSAGE = (
    "Missing Node.js modules lock file "
    "(`yarn.lock`, `package-lock.json`, or `pnpm-lock.yaml`)"
)


def detect_lockfile(root: Path, optional: bool = False) -> LockfileKind | None:
    """Return the package manager whose lock file is present.

    Checks ``yarn.lock``, ``package-lock.json``, ``pnpm-lock.yaml`` in
    that order. Returns ``None`` when ``optional`` is set and there is no
    package.json either.

    Raises:
        ConfigError: If no lock file exists and skipping is not allowed.
    """
    for kind in LockfileKind:
        if (root / kind.filename).is_file():
            return kind

    if optional and find_manifest(root) is None:
        logger.info("No lock file and no package.json, skipping")
        return None

    raise ConfigError(MISSING_LOCKFILE_MESSAGE)


def enable_corepack(runner: ProcessRunner) -> None:
    """Make the yarn/pnpm shims available via corepack."""
    if not runner.which("corepack"):
        runner.run("npm install --global corepack")
    runner.run("corepack enable")


def install_node_modules(runner: ProcessRunner, optional: bool = False) -> LockfileKind | None:
    """Install node modules with the detected package manager."""
    kind = detect_lockfile(runner.root, optional=optional)
    if kind is None:
        return None

    logger.info("Using %s (%s)", kind.value, kind.filename)
    if kind.needs_corepack:
        enable_corepack(runner)
    runner.run(kind.install_command)
    return kind
