"""
Shared CLI plumbing — runner construction and error reporting.

Commands stay thin: build a runner from the global options, call one
service, report the outcome.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.errors import DockprepError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def echo_command(line: str) -> None:
    click.secho(f"▶ {line}", fg="cyan", err=True)


def make_runner(ctx: click.Context) -> ProcessRunner:
    """Runner bound to ``--chdir`` and honouring ``--dry-run``."""
    obj = ctx.obj or {}
    root: Path = obj.get("root") or Path.cwd()
    registry = obj.get("registry")

    kwargs: dict[str, Any] = {
        "root": root,
        "dry_run": obj.get("dry_run", False),
        "echo": None if obj.get("quiet") else echo_command,
    }
    if registry is not None:
        kwargs["registry"] = registry
    if obj.get("env") is not None:
        kwargs["env"] = obj["env"]
    return ProcessRunner(**kwargs)


def reports_errors(func: F) -> F:
    """Turn a ``DockprepError`` into a red message and an exit status."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DockprepError as e:
            logger.debug("Command aborted", exc_info=True)
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(e.exit_code)

    return wrapper  # type: ignore[return-value]
