"""
Tests for the process runner — argv normalization, dispatch, errors.
"""

import pytest

from dockprep.core.engine.runner import ProcessRunner, normalize_command
from dockprep.core.errors import CommandError


class TestNormalizeCommand:
    def test_leading_string_is_split(self):
        assert normalize_command(["apt-get install --yes", "curl"]) == [
            "apt-get", "install", "--yes", "curl",
        ]

    def test_later_pieces_not_split(self):
        assert normalize_command(["echo", "hello world"]) == ["echo", "hello world"]

    def test_nested_lists_flattened_and_none_dropped(self):
        assert normalize_command(["yarn", ["install", None, "--frozen-lockfile"], None]) == [
            "yarn", "install", "--frozen-lockfile",
        ]

    def test_non_strings_stringified(self, tmp_path):
        assert normalize_command(["rm", "-rf", tmp_path]) == ["rm", "-rf", str(tmp_path)]


class TestProcessRunner:
    def test_run_records_command(self, runner, mock_shell):
        receipt = runner.run("bundle install", env={"BUNDLE_FROZEN": "1"})
        assert receipt.ok
        assert mock_shell.commands == [["bundle", "install"]]
        assert mock_shell.env_for("bundle install") == {"BUNDLE_FROZEN": "1"}
        assert runner.receipts == [receipt]

    def test_run_uses_root_as_cwd(self, runner, mock_shell, app_dir):
        runner.run("true")
        assert mock_shell.call_log[0].project_root == str(app_dir)

    def test_run_raises_on_failure(self, runner, mock_shell):
        mock_shell.set_failure("bundle install", error="Gemfile.lock out of date", return_code=16)
        with pytest.raises(CommandError) as exc:
            runner.run("bundle install")
        assert exc.value.returncode == 16
        assert exc.value.exit_code == 16
        assert exc.value.command == ["bundle", "install"]
        assert "out of date" in str(exc.value)

    def test_capture_returns_output(self, runner, mock_shell):
        mock_shell.set_output("ruby -v", "ruby 3.3.0")
        assert runner.capture("ruby", "-v") == "ruby 3.3.0"
        assert mock_shell.call_log[0].action.capture

    def test_capture_raises_on_failure(self, runner, mock_shell):
        mock_shell.set_failure("ruby -v")
        with pytest.raises(CommandError):
            runner.capture("ruby", "-v")

    def test_exec_returns_status(self, runner, mock_shell):
        mock_shell.set_failure("rspec", return_code=3)
        assert runner.exec("rspec") == 3
        assert runner.exec("true") == 0

    def test_echo_prefixes_env(self, runner):
        lines = []
        runner.echo = lines.append
        runner.run("bin/rails assets:precompile", env={"SECRET_KEY_BASE_DUMMY": "1"})
        assert lines == ["SECRET_KEY_BASE_DUMMY=1 bin/rails assets:precompile"]

    def test_dry_run_executes_nothing(self, app_dir, registry, mock_shell, fake_env):
        runner = ProcessRunner(root=app_dir, registry=registry, env=fake_env, dry_run=True)
        runner.run("apt-get update -qq")
        assert runner.capture("ruby -v") == ""
        assert runner.exec("true") == 0
        assert mock_shell.call_count == 0

    def test_exec_marks_action_as_replacing(self, runner, mock_shell):
        assert runner.exec("bin/rails", "server", env={"PORT": "3000"}) == 0
        action = mock_shell.call_log[0].action
        assert action.replace
        assert action.env == {"PORT": "3000"}

    def test_exec_dry_run_only_echoes(self, app_dir, registry, mock_shell, fake_env):
        lines: list[str] = []
        runner = ProcessRunner(root=app_dir, registry=registry, env=fake_env, dry_run=True, echo=lines.append)
        assert runner.exec("./bin/rails", "server") == 0
        assert lines == ["./bin/rails server"]
        assert mock_shell.call_count == 0

    def test_which_uses_runner_path(self, runner, add_tool):
        assert runner.which("node") is None
        tool = add_tool("node")
        assert runner.which("node") == str(tool)


class TestCommandError:
    def test_negative_status_exits_one(self):
        assert CommandError(["x"], -9).exit_code == 1

    def test_message_quotes_command(self):
        err = CommandError(["echo", "a b"], 2)
        assert str(err) == "Command failed (exit 2): echo 'a b'"
