"""
Process runner — the one place commands are issued from.

Services describe commands as argv pieces; the runner normalizes them
into an Action, dispatches it through the adapter registry and turns a
failed Receipt into ``CommandError``. Every command is echoed before it
runs so the build log reads like the equivalent shell script.

    runner.run("apt-get install --yes", *packages)
    runner.run("bundle install", env={"BUNDLE_FROZEN": "1"})
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dockprep.adapters.registry import AdapterRegistry
from dockprep.core.errors import CommandError
from dockprep.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


def normalize_command(cmd: Iterable[Any]) -> list[str]:
    """Flatten command pieces into an argv list.

    A leading string that contains spaces is split shell-style, nested
    lists/tuples are flattened and ``None`` pieces are dropped.
    """
    pieces = list(cmd)
    if pieces and isinstance(pieces[0], str) and " " in pieces[0]:
        pieces[0:1] = shlex.split(pieces[0])

    argv: list[str] = []
    for piece in pieces:
        if piece is None:
            continue
        if isinstance(piece, (list, tuple)):
            argv.extend(str(p) for p in piece if p is not None)
        else:
            argv.append(str(piece))
    return argv


@dataclass
class ProcessRunner:
    """Synchronous command runner bound to one working directory.

    Attributes:
        root: Directory commands run in.
        registry: Adapter registry; the default uses the real shell.
        env: The invoking environment; used for ``which`` and read by
            services instead of ``os.environ``. Command overrides are
            applied on top of the real process environment.
        dry_run: Echo commands without executing them.
        echo: Callback receiving each command line before it runs.
    """

    root: Path = field(default_factory=Path.cwd)
    registry: AdapterRegistry = field(default_factory=AdapterRegistry.default)
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    dry_run: bool = False
    echo: Callable[[str], None] | None = None
    receipts: list[Receipt] = field(default_factory=list)

    def run(self, *cmd: Any, env: Mapping[str, str] | None = None) -> Receipt:
        """Run a command, raising ``CommandError`` on non-zero exit."""
        receipt = self._dispatch(cmd, env=env, capture=False)
        if receipt.failed:
            raise CommandError(
                normalize_command(cmd),
                receipt.return_code or 1,
                detail=receipt.error or "",
            )
        return receipt

    def capture(self, *cmd: Any, env: Mapping[str, str] | None = None) -> str:
        """Run a command and return its stdout; raises like ``run``."""
        receipt = self._dispatch(cmd, env=env, capture=True)
        if receipt.failed:
            raise CommandError(
                normalize_command(cmd),
                receipt.return_code or 1,
                detail=receipt.error or "",
            )
        if receipt.status == "skipped":
            return ""
        return receipt.output

    def exec(self, *cmd: Any, env: Mapping[str, str] | None = None) -> int:
        """Replace this process with the command where the OS allows it.

        Returns only when nothing was exec'd: under dry-run, with a test
        double, when the command could not be started, or on platforms
        without exec, where it ran as a child. Never raises; the exit
        status is returned.
        """
        receipt = self._dispatch(cmd, env=env, capture=False, replace=True)
        if receipt.failed:
            logger.debug("%s exited with %s: %s", receipt.action_id, receipt.return_code, receipt.error)
        return receipt.return_code if receipt.return_code is not None else 0

    def which(self, name: str) -> str | None:
        """Locate an executable on this runner's ``PATH``."""
        return shutil.which(name, path=self.env.get("PATH"))

    # ── Internals ───────────────────────────────────────────────

    def _dispatch(
        self,
        cmd: tuple[Any, ...],
        env: Mapping[str, str] | None,
        capture: bool,
        replace: bool = False,
    ) -> Receipt:
        argv = normalize_command(cmd)
        action = Action.for_command(argv, env=dict(env or {}), capture=capture, replace=replace)

        line = action.id
        if action.env:
            line = " ".join(f"{k}={shlex.quote(v)}" for k, v in sorted(action.env.items())) + " " + line
        if self.echo:
            self.echo(line)
        logger.debug("run: %s", line)

        receipt = self.registry.execute_action(
            action,
            project_root=str(self.root),
            dry_run=self.dry_run,
        )
        self.receipts.append(receipt)
        return receipt
