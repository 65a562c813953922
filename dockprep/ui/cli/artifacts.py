"""
CLI command for relocating build outputs into the artifacts tree.
"""

from __future__ import annotations

import click

from dockprep.core.services.artifacts import DEFAULT_ARTIFACTS_DIR
from dockprep.ui.cli.common import echo_command, reports_errors


@click.command("transmute-to-artifacts")
@click.argument("paths", nargs=-1)
@click.option(
    "--artifacts-dir",
    default=DEFAULT_ARTIFACTS_DIR,
    show_default=True,
    help="The artifacts directory.",
)
@click.pass_context
@reports_errors
def transmute_to_artifacts(ctx: click.Context, paths: tuple[str, ...], artifacts_dir: str) -> None:
    """Move files and directories to an artifacts directory, and replace the originals with symlinks."""
    from dockprep.core.services.artifacts import transmute_to_artifacts as relocate

    obj = ctx.obj or {}
    relocate(
        paths,
        artifacts_dir=artifacts_dir,
        cwd=obj.get("root"),
        dry_run=obj.get("dry_run", False),
        echo=None if obj.get("quiet") else echo_command,
    )
