"""
dockprep — CLI entrypoint.

Usage (typically from a Dockerfile RUN step):
    dockprep install-packages --buildtime --gem-buildtime --clean
    dockprep install-gems --clean
    dockprep install-node --optional
    dockprep install-node-modules --optional
    dockprep prepare-rails-app --clean
    dockprep transmute-to-artifacts /usr/local/bundle
    dockprep rails-entrypoint ./bin/rails server
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from dockprep import __version__
from dockprep.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="dockprep")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--dry-run", is_flag=True, help="Print commands without running them.")
@click.option(
    "--chdir",
    "-C",
    "chdir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Application directory (default: current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    dry_run: bool,
    chdir: Path | None,
) -> None:
    """dockprep — prepare a Rails application inside a container image build."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["dry_run"] = dry_run
    ctx.obj["root"] = (chdir or Path.cwd()).resolve()

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


# ── Register commands from dockprep/ui/cli/ ──────────────────────

from dockprep.ui.cli.artifacts import transmute_to_artifacts  # noqa: E402
from dockprep.ui.cli.gems import install_gems  # noqa: E402
from dockprep.ui.cli.node import install_node, install_node_modules  # noqa: E402
from dockprep.ui.cli.packages import install_packages  # noqa: E402
from dockprep.ui.cli.rails import prepare_rails_app, rails_entrypoint  # noqa: E402

cli.add_command(install_packages)
cli.add_command(transmute_to_artifacts)
cli.add_command(install_gems)
cli.add_command(install_node)
cli.add_command(install_node_modules)
cli.add_command(prepare_rails_app)
cli.add_command(rails_entrypoint)


if __name__ == "__main__":
    cli()
