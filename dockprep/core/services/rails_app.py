"""
Rails application preparation and entrypoint.

``prepare-rails-app`` runs the build-time steps every Rails image needs:
binstub normalization, Bootsnap precompilation and asset precompilation.
``rails-entrypoint`` is the container's ENTRYPOINT.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

from dockprep.core.config.bundler_settings import BundlerSettings
from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.errors import CommandError, ConfigError
from dockprep.core.models.dependency import DependencyGraph
from dockprep.core.services.binstubs import normalize_binstubs, ruby_command_name
from dockprep.core.services.cleanup import remove_paths
from dockprep.core.services.gemfile import read_dependency_graph

logger = logging.getLogger(__name__)

ASSETS_CACHE_DIR = "tmp/cache/assets"
DOCKER_ENTRYPOINT = "bin/docker-entrypoint"
MASTER_KEY_FILE = "config/master.key"

# Rails 7.1 replaced SECRET_KEY_BASE=1 hacks with SECRET_KEY_BASE_DUMMY
_DUMMY_SECRET_SINCE = (7, 1)

_SERVER_RE = re.compile(r"\brails s(erver)?$")


def version_tuple(version: str) -> tuple[int, ...]:
    """Leading numeric segments: ``"7.1.0.beta1"`` → ``(7, 1, 0)``."""
    parts: list[int] = []
    for segment in version.split("."):
        if not segment.isdigit():
            break
        parts.append(int(segment))
    return tuple(parts)


def secret_key_base_dummy(
    root: Path,
    environ: Mapping[str, str],
    rails_version: str | None,
) -> dict[str, str] | None:
    """Env that lets asset precompilation boot without real credentials.

    ``None`` when a real secret is available through ``SECRET_KEY_BASE``,
    ``RAILS_MASTER_KEY`` or ``config/master.key``.
    """
    if environ.get("SECRET_KEY_BASE") or environ.get("RAILS_MASTER_KEY"):
        return None
    if (root / MASTER_KEY_FILE).exists():
        return None

    if rails_version and version_tuple(rails_version) < _DUMMY_SECRET_SINCE:
        return {"SECRET_KEY_BASE": "1"}
    return {"SECRET_KEY_BASE_DUMMY": "1"}


def rake_task(runner: ProcessRunner, name: str) -> bool:
    """Whether the app defines rake task ``name``.

    A failing ``rake`` counts as "no such task", matching how the task
    list is probed in a plain shell.
    """
    try:
        output = runner.capture("rake", "--tasks", f"^{re.escape(name)}$")
    except CommandError as e:
        logger.debug("rake --tasks failed: %s", e)
        return False
    return bool(output.strip())


def load_graph(runner: ProcessRunner) -> DependencyGraph:
    """The app's gems, honouring the persisted group selection."""
    settings = BundlerSettings(runner.root, environ=runner.env).group_settings()
    return read_dependency_graph(runner.root, settings, runner.env)


def prepare_rails_app(runner: ProcessRunner, clean: bool = False) -> None:
    """Normalize binstubs, precompile Bootsnap and assets."""
    root = runner.root

    if runner.echo:
        runner.echo("normalize bin/**/*")
    if not runner.dry_run:
        normalized = normalize_binstubs(root / "bin", ruby=ruby_command_name(runner.env))
        logger.info("Normalized %d binstub(s)", len(normalized))

    graph = load_graph(runner)

    if "bootsnap" in graph:
        runner.run("bundle exec bootsnap precompile --gemfile app/ lib/")

    if rake_task(runner, "assets:precompile"):
        rails = graph.get("rails")
        env = secret_key_base_dummy(root, runner.env, rails.version if rails else None)
        runner.run("bin/rails assets:precompile", env=env)

    if clean:
        remove_paths(runner, [ASSETS_CACHE_DIR])


def starts_server(args: Sequence[str]) -> bool:
    """``rails s`` / ``rails server`` / ``./bin/rails server ...``."""
    return bool(_SERVER_RE.search(" ".join(args[:2])))


def rails_entrypoint(runner: ProcessRunner, args: Sequence[str]) -> int:
    """Replace this process with the container command.

    Delegates entirely to ``bin/docker-entrypoint`` when the app ships
    one. Otherwise the database is prepared before a server starts. The
    exec makes the command PID 1 in its place, so container signals reach
    it. Returns an exit status only when nothing was exec'd.
    """
    if not args:
        raise ConfigError("rails-entrypoint needs a command to run, e.g. `./bin/rails server`")

    if (runner.root / DOCKER_ENTRYPOINT).exists():
        return _exit_status(runner.exec([DOCKER_ENTRYPOINT, *args]))

    if starts_server(args):
        runner.run("bin/rails db:prepare")
    return _exit_status(runner.exec(list(args)))


def _exit_status(code: int) -> int:
    """Map a signal death (negative code) to the shell's 128+N convention."""
    return 128 - code if code < 0 else code
