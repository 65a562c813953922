"""
CLI commands for Node.js and Node module installation.
"""

from __future__ import annotations

import click

from dockprep.core.services.node_toolchain import DEFAULT_PREFIX
from dockprep.ui.cli.common import make_runner, reports_errors


@click.command("install-node")
@click.option(
    "--optional",
    is_flag=True,
    help="Skips install if a .node-version or package.json file is not present.",
)
@click.option(
    "--prefix",
    default=DEFAULT_PREFIX,
    show_default=True,
    help="The destination superdirectory.  Files will be installed in `bin/`, `lib/`, etc.",
)
@click.pass_context
@reports_errors
def install_node(ctx: click.Context, optional: bool, prefix: str) -> None:
    """Install Node.js."""
    from dockprep.core.services.node_toolchain import install_node as n_install

    source = n_install(make_runner(ctx), optional=optional, prefix=prefix)
    if source is None and not ctx.obj.get("quiet"):
        click.secho("⊘ No Node.js version source, skipped", fg="yellow", err=True)


@click.command("install-node-modules")
@click.option(
    "--optional",
    is_flag=True,
    help="Skips install if a `yarn.lock`, `package-lock.json`, or `pnpm-lock.yaml` file is not present.",
)
@click.pass_context
@reports_errors
def install_node_modules(ctx: click.Context, optional: bool) -> None:
    """Install Node.js modules using Yarn, NPM, or PNPM."""
    from dockprep.core.services.node_modules import install_node_modules as modules_install

    kind = modules_install(make_runner(ctx), optional=optional)
    if kind is None and not ctx.obj.get("quiet"):
        click.secho("⊘ No Node.js lock file, skipped", fg="yellow", err=True)
