"""
Tests for CLI commands — global options, wiring, and error reporting.
"""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from dockprep.main import cli

RAKE_PROBE = "rake --tasks '^assets:precompile$'"


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def invoke(registry, fake_env):
    """Invoke the CLI against the mock shell and the fake environment."""

    def _invoke(*args: str):
        return CliRunner().invoke(cli, list(args), obj={"registry": registry, "env": fake_env})

    return _invoke


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Rails application" in result.output
        for command in (
            "install-packages",
            "install-gems",
            "install-node",
            "install-node-modules",
            "prepare-rails-app",
            "rails-entrypoint",
            "transmute-to-artifacts",
        ):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_chdir_must_exist(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["-C", str(tmp_path / "nope"), "install-gems"])
        assert result.exit_code == 2


class TestInstallPackagesCommand:
    def test_gem_runtime(self, invoke, rails_app: Path, mock_shell):
        result = invoke("-C", str(rails_app), "install-packages", "--gem-runtime")
        assert result.exit_code == 0, result.output
        assert mock_shell.commands[-1] == [
            "apt-get", "install", "--no-install-recommends", "--yes",
            "postgresql-client", "libsqlite3-0",
        ]
        assert "▶ apt-get update -qq" in result.output

    def test_explicit_packages_need_no_lockfile(self, invoke, app_dir: Path, mock_shell):
        result = invoke("-C", str(app_dir), "install-packages", "libjemalloc2", "--buildtime")
        assert result.exit_code == 0, result.output
        assert mock_shell.commands[-1][4:6] == ["libjemalloc2", "build-essential"]

    def test_nothing_to_install(self, invoke, app_dir: Path, mock_shell):
        result = invoke("-C", str(app_dir), "install-packages")
        assert result.exit_code == 0
        assert mock_shell.call_count == 0
        assert "No packages to install" in result.output

    def test_missing_lockfile_reported(self, invoke, app_dir: Path):
        result = invoke("-C", str(app_dir), "install-packages", "--gem-buildtime")
        assert result.exit_code == 1
        assert "❌ Missing Gemfile.lock" in result.output

    def test_apt_failure_exit_code(self, invoke, app_dir: Path, mock_shell):
        mock_shell.set_failure("apt-get update -qq", return_code=100)
        result = invoke("-C", str(app_dir), "install-packages", "curl")
        assert result.exit_code == 100
        assert "Command failed (exit 100)" in result.output

    def test_dry_run(self, invoke, rails_app: Path, mock_shell):
        result = invoke("--dry-run", "-C", str(rails_app), "install-packages", "--gem-buildtime")
        assert result.exit_code == 0
        assert mock_shell.call_count == 0
        assert "libpq-dev libsqlite3-dev" in result.output

    def test_quiet_hides_echo(self, invoke, app_dir: Path):
        result = invoke("-q", "-C", str(app_dir), "install-packages", "curl")
        assert result.exit_code == 0
        assert "▶" not in result.output


class TestInstallGemsCommand:
    def test_runs_bundle(self, invoke, rails_app: Path, mock_shell):
        result = invoke("-C", str(rails_app), "install-gems")
        assert result.exit_code == 0, result.output
        assert mock_shell.commands[-1] == ["bundle", "install"]


class TestNodeCommands:
    def test_install_node_optional_skip(self, invoke, app_dir: Path, mock_shell):
        result = invoke("-C", str(app_dir), "install-node", "--optional")
        assert result.exit_code == 0
        assert "skipped" in result.output
        assert mock_shell.call_count == 0

    def test_install_node_missing_version(self, invoke, app_dir: Path):
        result = invoke("-C", str(app_dir), "install-node")
        assert result.exit_code == 1
        assert "Missing Node.js version" in result.output

    def test_install_node_modules(self, invoke, app_dir: Path, mock_shell):
        (app_dir / "package-lock.json").write_text("{}")
        result = invoke("-C", str(app_dir), "install-node-modules")
        assert result.exit_code == 0
        assert mock_shell.commands == [["npm", "ci"]]

    def test_install_node_modules_missing_lockfile(self, invoke, app_dir: Path):
        (app_dir / "package.json").write_text("{}")
        result = invoke("-C", str(app_dir), "install-node-modules", "--optional")
        assert result.exit_code == 1
        assert "Missing Node.js modules lock file" in result.output


class TestRailsCommands:
    def test_prepare_rails_app(self, invoke, rails_app: Path, mock_shell):
        mock_shell.set_output(RAKE_PROBE, "rake assets:precompile")
        result = invoke("-C", str(rails_app), "prepare-rails-app", "--clean")
        assert result.exit_code == 0, result.output
        assert ["bin/rails", "assets:precompile"] in mock_shell.commands
        assert "SECRET_KEY_BASE_DUMMY=1 bin/rails assets:precompile" in result.output

    def test_entrypoint_passes_options_through(self, invoke, app_dir: Path, mock_shell):
        result = invoke("-C", str(app_dir), "rails-entrypoint", "./bin/rails", "server", "-b", "0.0.0.0")
        assert result.exit_code == 0, result.output
        assert mock_shell.commands == [
            ["bin/rails", "db:prepare"],
            ["./bin/rails", "server", "-b", "0.0.0.0"],
        ]

    def test_entrypoint_exit_status(self, invoke, app_dir: Path, mock_shell):
        mock_shell.set_failure("bin/jobs --verbose", return_code=5)
        result = invoke("-C", str(app_dir), "rails-entrypoint", "bin/jobs", "--verbose")
        assert result.exit_code == 5

    def test_entrypoint_without_args(self, invoke, app_dir: Path):
        result = invoke("-C", str(app_dir), "rails-entrypoint")
        assert result.exit_code == 1
        assert "needs a command" in result.output


class TestTransmuteCommand:
    def test_relocates(self, invoke, app_dir: Path, tmp_path: Path):
        (app_dir / "vendor").mkdir()
        artifacts = tmp_path / "artifacts"
        result = invoke(
            "-C", str(app_dir), "transmute-to-artifacts", "vendor", "--artifacts-dir", str(artifacts)
        )
        assert result.exit_code == 0, result.output
        assert (app_dir / "vendor").is_symlink()

    def test_missing_path(self, invoke, app_dir: Path, tmp_path: Path):
        result = invoke(
            "-C", str(app_dir), "transmute-to-artifacts", "missing",
            "--artifacts-dir", str(tmp_path / "artifacts"),
        )
        assert result.exit_code == 1
        assert "no such file" in result.output
