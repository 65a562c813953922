"""
CLI commands for Rails app preparation and the container entrypoint.
"""

from __future__ import annotations

import sys

import click

from dockprep.ui.cli.common import make_runner, reports_errors


@click.command("prepare-rails-app")
@click.option("--clean", is_flag=True, help="Clean asset precompilation cache after precompiling.")
@click.pass_context
@reports_errors
def prepare_rails_app(ctx: click.Context, clean: bool) -> None:
    """Precompile assets, precompile code with Bootsnap, and normalize binstubs."""
    from dockprep.core.services.rails_app import prepare_rails_app as prepare

    prepare(make_runner(ctx), clean=clean)


@click.command(
    "rails-entrypoint",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
@reports_errors
def rails_entrypoint(ctx: click.Context, args: tuple[str, ...]) -> None:
    """Entrypoint for a Rails application.

    Runs `bin/docker-entrypoint` if present; otherwise prepares the
    database before `rails server` and runs ARGS. Exits with the
    command's status.
    """
    from dockprep.core.services.rails_app import rails_entrypoint as entrypoint

    sys.exit(entrypoint(make_runner(ctx), args))
