"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from dockprep.adapters.mock import MockAdapter
from dockprep.adapters.registry import AdapterRegistry
from dockprep.core.engine.runner import ProcessRunner

GEMFILE = textwrap.dedent("""\
    source "https://rubygems.org"

    gem "rails", "~> 7.1.2"
    gem "pg", "~> 1.1"
    gem "bootsnap", require: false

    group :development, :test do
      gem "debug", platforms: %i[ mri windows ]
    end

    group :development do
      gem "sqlite3", "~> 1.4"
    end

    group :test do
      gem "capybara"
    end
""")

GEMFILE_LOCK = textwrap.dedent("""\
    GEM
      remote: https://rubygems.org/
      specs:
        bootsnap (1.17.0)
          msgpack (~> 1.2)
        capybara (3.39.2)
          addressable
        addressable (2.8.6)
        debug (1.9.1)
        msgpack (1.7.2)
        pg (1.5.4)
        rails (7.1.2)
          railties (= 7.1.2)
        railties (7.1.2)
        sqlite3 (1.7.0-x86_64-linux)
        sqlite3 (1.7.0-aarch64-linux)

    PLATFORMS
      aarch64-linux
      x86_64-linux

    DEPENDENCIES
      bootsnap
      capybara
      debug
      pg (~> 1.1)
      rails (~> 7.1.2)
      sqlite3 (~> 1.4)

    BUNDLED WITH
       2.4.22
""")


@pytest.fixture
def mock_shell() -> MockAdapter:
    """Shell test double; records every command instead of running it."""
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def registry(mock_shell: MockAdapter) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(mock_shell)
    return registry


@pytest.fixture
def fake_env(tmp_path: Path) -> dict[str, str]:
    """An environment whose PATH holds no executables."""
    bin_dir = tmp_path / "fake-bin"
    bin_dir.mkdir()
    return {"PATH": str(bin_dir), "HOME": str(tmp_path / "home")}


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """An empty application directory."""
    app = tmp_path / "app"
    app.mkdir()
    return app


@pytest.fixture
def runner(app_dir: Path, registry: AdapterRegistry, fake_env: dict[str, str]) -> ProcessRunner:
    return ProcessRunner(root=app_dir, registry=registry, env=fake_env)


@pytest.fixture
def rails_app(app_dir: Path) -> Path:
    """An application directory with a Gemfile and Gemfile.lock."""
    (app_dir / "Gemfile").write_text(GEMFILE)
    (app_dir / "Gemfile.lock").write_text(GEMFILE_LOCK)
    return app_dir


@pytest.fixture
def add_tool(fake_env: dict[str, str]):
    """Put a stub executable on the fake PATH so ``which`` finds it."""

    def _add(name: str) -> Path:
        path = Path(fake_env["PATH"]) / name
        path.write_text("#!/bin/sh\nexit 0\n")
        path.chmod(0o755)
        return path

    return _add
