"""
Manifest loader — finds and reads the application's package.json.

The manifest is optional. Its presence changes how the ``--optional``
Node commands behave: an app with a package.json but no version file or
lock file is misconfigured, whereas an app without one simply has no
Node.js side to install.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dockprep.core.errors import ConfigError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"


def find_manifest(root: Path) -> Path | None:
    """Return ``root/package.json``, else the first ``root/*/package.json``.

    Rails apps with jsbundling sometimes keep their JS project one level
    down, so immediate subdirectories are searched too (sorted, for a
    stable pick).
    """
    candidate = root / MANIFEST_FILE
    if candidate.is_file():
        return candidate

    for path in sorted(root.glob(f"*/{MANIFEST_FILE}")):
        if path.is_file():
            return path

    return None


def load_manifest(root: Path) -> dict[str, Any]:
    """Load the manifest as a dict, ``{}`` when there is none.

    Raises:
        ConfigError: If the manifest exists but is not a JSON object.
    """
    path = find_manifest(root)
    if path is None:
        return {}

    logger.debug("Loading manifest from %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def manifest_node_version(manifest: dict[str, Any]) -> str | None:
    """The ``engines.node`` constraint, if declared."""
    engines = manifest.get("engines")
    if not isinstance(engines, dict):
        return None
    version = engines.get("node")
    return str(version) if version else None
