"""
CLI command for OS package installation.

Thin wrapper over ``dockprep.core.services.system_packages``.
"""

from __future__ import annotations

import click

from dockprep.ui.cli.common import make_runner, reports_errors


@click.command("install-packages")
@click.argument("packages", nargs=-1)
@click.option("--buildtime", is_flag=True, help="Include buildtime packages (e.g. `build-essential`).")
@click.option(
    "--gem-buildtime",
    is_flag=True,
    help="Include gem-related buildtime packages (e.g. `libsqlite3-dev` if using SQLite).",
)
@click.option(
    "--gem-runtime",
    is_flag=True,
    help="Include gem-related runtime packages (e.g. `libsqlite3-0` if using SQLite).",
)
@click.option("--clean", is_flag=True, help="Clean apt cache directories after installing packages.")
@click.pass_context
@reports_errors
def install_packages(
    ctx: click.Context,
    packages: tuple[str, ...],
    buildtime: bool,
    gem_buildtime: bool,
    gem_runtime: bool,
    clean: bool,
) -> None:
    """Install apt packages."""
    from dockprep.core.models.dependency import DependencyGraph
    from dockprep.core.models.policy import InstallationPolicy
    from dockprep.core.services.rails_app import load_graph
    from dockprep.core.services.system_packages import (
        compute_packages,
        install_packages as apt_install,
        needs_graph,
    )

    runner = make_runner(ctx)
    policy = InstallationPolicy(
        buildtime=buildtime,
        gem_buildtime=gem_buildtime,
        gem_runtime=gem_runtime,
        clean=clean,
    )

    graph = load_graph(runner) if needs_graph(policy) else DependencyGraph()
    selected = compute_packages(graph, policy, extra=packages)

    if not apt_install(runner, selected, clean=policy.clean) and not ctx.obj.get("quiet"):
        click.secho("⊘ No packages to install", fg="yellow", err=True)
