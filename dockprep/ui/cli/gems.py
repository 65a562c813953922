"""
CLI command for gem installation.
"""

from __future__ import annotations

import click

from dockprep.ui.cli.common import make_runner, reports_errors


@click.command("install-gems")
@click.option("--clean", is_flag=True, help="Clean Bundler cache after installing gems.")
@click.pass_context
@reports_errors
def install_gems(ctx: click.Context, clean: bool) -> None:
    """Install gems with Bundler."""
    from dockprep.core.services.gems import install_gems as bundle_install

    bundle_install(make_runner(ctx), clean=clean)
