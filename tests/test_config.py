"""
Tests for configuration loading — Bundler settings and package.json.
"""

import json
from pathlib import Path

import pytest

from dockprep.core.config.bundler_settings import (
    BundlerSettings,
    settings_key,
    split_groups,
    split_list,
)
from dockprep.core.config.loader import find_manifest, load_manifest, manifest_node_version
from dockprep.core.errors import ConfigError


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


# ── Bundler settings ─────────────────────────────────────────────────


class TestSettingsHelpers:
    def test_settings_key(self):
        assert settings_key("without") == "BUNDLE_WITHOUT"
        assert settings_key("build.pg") == "BUNDLE_BUILD__PG"

    def test_split_list(self):
        assert split_list("development:test") == ["development", "test"]
        assert split_list("development test") == ["development", "test"]
        assert split_list(None) == []
        assert split_list(["a", "b"]) == ["a", "b"]

    def test_split_groups_is_lenient(self):
        assert split_groups("web,worker") == ["web", "worker"]
        assert split_groups("web worker") == ["web", "worker"]
        assert split_groups("web:worker") == ["web", "worker"]


class TestBundlerSettings:
    def test_empty(self, app_dir: Path, fake_env):
        settings = BundlerSettings(app_dir, environ=fake_env)
        assert settings.get("without") is None
        gs = settings.group_settings()
        assert gs.with_groups == [] and gs.without_groups == [] and gs.only == []

    def test_local_config(self, app_dir: Path, fake_env):
        _write_config(app_dir / ".bundle" / "config", 'BUNDLE_WITHOUT: "development:test"\n')
        settings = BundlerSettings(app_dir, environ=fake_env)
        assert settings.group_settings().without_groups == ["development", "test"]

    def test_local_beats_env_beats_global(self, app_dir: Path, fake_env):
        home = Path(fake_env["HOME"])
        _write_config(home / ".bundle" / "config", 'BUNDLE_WITH: "global"\nBUNDLE_ONLY: "default"\n')
        _write_config(app_dir / ".bundle" / "config", 'BUNDLE_WITHOUT: "local"\n')
        env = {**fake_env, "BUNDLE_WITHOUT": "env", "BUNDLE_WITH": "env"}

        settings = BundlerSettings(app_dir, environ=env)
        assert settings.get("without") == "local"
        assert settings.get("with") == "env"
        assert settings.get("only") == "default"

    def test_bundle_app_config(self, app_dir: Path, fake_env):
        _write_config(app_dir / "docker" / "bundle" / "config", 'BUNDLE_ONLY: "default,web"\n')
        env = {**fake_env, "BUNDLE_APP_CONFIG": "docker/bundle"}
        assert BundlerSettings(app_dir, environ=env).group_settings().only == ["default", "web"]

    def test_bundle_user_config(self, app_dir: Path, fake_env, tmp_path: Path):
        user = tmp_path / "user-config"
        _write_config(user, 'BUNDLE_WITH: "tools"\n')
        env = {**fake_env, "BUNDLE_USER_CONFIG": str(user)}
        assert BundlerSettings(app_dir, environ=env).get_list("with") == ["tools"]

    def test_invalid_yaml(self, app_dir: Path, fake_env):
        _write_config(app_dir / ".bundle" / "config", "BUNDLE_WITHOUT: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            BundlerSettings(app_dir, environ=fake_env)

    def test_not_a_mapping(self, app_dir: Path, fake_env):
        _write_config(app_dir / ".bundle" / "config", "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            BundlerSettings(app_dir, environ=fake_env)


# ── package.json ─────────────────────────────────────────────────────


class TestManifest:
    def test_missing(self, app_dir: Path):
        assert find_manifest(app_dir) is None
        assert load_manifest(app_dir) == {}

    def test_root_manifest(self, app_dir: Path):
        (app_dir / "package.json").write_text(json.dumps({"engines": {"node": "20.x"}}))
        manifest = load_manifest(app_dir)
        assert manifest_node_version(manifest) == "20.x"

    def test_subdirectory_manifest(self, app_dir: Path):
        (app_dir / "frontend").mkdir()
        (app_dir / "frontend" / "package.json").write_text("{}")
        assert find_manifest(app_dir) == app_dir / "frontend" / "package.json"

    def test_root_preferred(self, app_dir: Path):
        (app_dir / "package.json").write_text("{}")
        (app_dir / "frontend").mkdir()
        (app_dir / "frontend" / "package.json").write_text("{}")
        assert find_manifest(app_dir) == app_dir / "package.json"

    def test_invalid_json(self, app_dir: Path):
        (app_dir / "package.json").write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_manifest(app_dir)

    def test_not_an_object(self, app_dir: Path):
        (app_dir / "package.json").write_text("[]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_manifest(app_dir)

    def test_no_engines(self):
        assert manifest_node_version({}) is None
        assert manifest_node_version({"engines": "node"}) is None
