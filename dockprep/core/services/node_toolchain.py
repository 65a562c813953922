"""
Node.js installation — ``install-node``.

The version comes from ``.node-version`` or ``.nvmrc`` (first found), or
from ``engines.node`` in package.json. Installation is delegated to the
``n`` version manager, whose ``auto`` mode reads those same sources.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import urllib.request
from pathlib import Path

from dockprep.core.config.loader import find_manifest, load_manifest, manifest_node_version
from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.errors import ConfigError
from dockprep.core.models.toolchain import VersionSource

logger = logging.getLogger(__name__)

VERSION_FILES: tuple[str, ...] = (".node-version", ".nvmrc")

N_INSTALLER_URL = "https://raw.githubusercontent.com/tj/n/HEAD/bin/n"
DEFAULT_PREFIX = "/usr/local"

MISSING_VERSION_MESSAGE = """\
Missing Node.js version from `.node-version`, `.nvmrc`, or `package.json`.

You can create a version file by running the following command in the same directory as `package.json`:

  $ node --version > .node-version"""


def select_version_source(root: Path, optional: bool = False) -> VersionSource | None:
    """Decide where the Node.js version comes from.

    Returns ``None`` when ``optional`` is set and the app has no
    package.json at all (nothing Node-related to install).

    Raises:
        ConfigError: If no source exists and skipping is not allowed.
    """
    for name in VERSION_FILES:
        path = root / name
        if path.is_file():
            version = path.read_text(encoding="utf-8").strip()
            return VersionSource(kind="file", path=name, version=version)

    manifest_path = find_manifest(root)
    version = manifest_node_version(load_manifest(root))
    if version and manifest_path is not None:
        return VersionSource(
            kind="manifest",
            path=str(manifest_path.relative_to(root)),
            version=version,
        )

    if optional and manifest_path is None:
        logger.info("No Node.js version source and no package.json, skipping")
        return None

    raise ConfigError(MISSING_VERSION_MESSAGE)


def download_installer(url: str, dest: Path, timeout: int = 60) -> Path:
    """Fetch the ``n`` script to ``dest`` and make it executable."""
    req = urllib.request.Request(url, headers={"User-Agent": "dockprep"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            dest.write_bytes(resp.read())
    except OSError as e:
        raise ConfigError(f"Failed to download {url}: {e}") from e

    mode = dest.stat().st_mode
    dest.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return dest


def install_node(
    runner: ProcessRunner,
    optional: bool = False,
    prefix: str = DEFAULT_PREFIX,
    installer_url: str = N_INSTALLER_URL,
) -> VersionSource | None:
    """Install the app's Node.js version under ``prefix``.

    When the version only lives in package.json and no ``node`` is on
    PATH yet, an LTS release is installed first: ``n auto`` needs a
    working node to read ``engines.node``.
    """
    source = select_version_source(runner.root, optional=optional)
    if source is None:
        return None

    logger.info("Node.js version from %s: %s", source.path, source.version or "?")

    with tempfile.TemporaryDirectory() as tmp:
        installer = Path(tmp) / "n"
        if runner.echo:
            runner.echo(f"curl -fsSL {installer_url} -o {installer}")
        if not runner.dry_run:
            download_installer(installer_url, installer)

        if not source.is_file and not runner.which("node"):
            runner.run(str(installer), "lts")
        runner.run(str(installer), "auto", env={"N_PREFIX": os.fspath(prefix)})

    return source
