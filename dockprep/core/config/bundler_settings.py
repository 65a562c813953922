"""
Bundler settings store — read-only view of Bundler's configuration.

Bundler keeps settings as ``BUNDLE_*`` keys in YAML files and in the
environment. Lookup follows Bundler's own precedence:

    1. local app config  ($BUNDLE_APP_CONFIG/config or <root>/.bundle/config)
    2. BUNDLE_* environment variables
    3. global config     ($BUNDLE_USER_CONFIG or ~/.bundle/config)

Writes are left to ``bundle config set --local`` so Bundler stays the
owner of its files.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from dockprep.core.errors import ConfigError
from dockprep.core.models.policy import GroupSettings

logger = logging.getLogger(__name__)

_LOCAL_CONFIG_DIR = ".bundle"
_CONFIG_FILE = "config"


def settings_key(name: str) -> str:
    """``"without"`` → ``"BUNDLE_WITHOUT"``."""
    return "BUNDLE_" + name.upper().replace(".", "__").replace("-", "___")


def split_list(value: str | list[str] | None) -> list[str]:
    """Split a Bundler list setting on colons and whitespace."""
    if value is None:
        return []
    if isinstance(value, list):
        value = ":".join(str(v) for v in value)
    return [part for part in re.split(r"[:\s]+", str(value)) if part]


def split_groups(value: str | list[str] | None) -> list[str]:
    """Split group names on any non-word character.

    Lenient on purpose for ``only``: ``"web,worker"``, ``"web worker"``
    and ``"web:worker"`` all name the same two groups.
    """
    if value is None:
        return []
    if isinstance(value, list):
        value = ":".join(str(v) for v in value)
    return [part for part in re.split(r"\W+", str(value)) if part]


class BundlerSettings:
    """Merged Bundler settings for one application directory."""

    def __init__(
        self,
        root: Path,
        environ: Mapping[str, str] | None = None,
    ):
        self.root = root
        self.environ = dict(os.environ if environ is None else environ)
        self._local = _read_config(self.local_config_path)
        self._global = _read_config(self.global_config_path)

    @property
    def local_config_path(self) -> Path:
        app_config = self.environ.get("BUNDLE_APP_CONFIG")
        if app_config:
            return (self.root / app_config / _CONFIG_FILE).resolve()
        return self.root / _LOCAL_CONFIG_DIR / _CONFIG_FILE

    @property
    def global_config_path(self) -> Path:
        user_config = self.environ.get("BUNDLE_USER_CONFIG")
        if user_config:
            return Path(user_config)
        home = self.environ.get("HOME") or str(Path.home())
        return Path(home) / _LOCAL_CONFIG_DIR / _CONFIG_FILE

    def get(self, name: str) -> str | None:
        """Look up a setting by its short name (``"without"``, ``"path"``)."""
        key = settings_key(name)
        for source in (self._local, self.environ, self._global):
            if key in source and source[key] is not None:
                return str(source[key])
        return None

    def get_list(self, name: str) -> list[str]:
        return split_list(self.get(name))

    def group_settings(self) -> GroupSettings:
        """The persisted ``with``/``without``/``only`` selection."""
        return GroupSettings(
            with_groups=self.get_list("with"),
            without_groups=self.get_list("without"),
            only=split_groups(self.get("only")),
        )


def _read_config(path: Path) -> dict[str, Any]:
    """Read one Bundler YAML config file, ``{}`` if absent."""
    if not path.is_file():
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in Bundler config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    logger.debug("Loaded Bundler config %s (%d keys)", path, len(data))
    return data
