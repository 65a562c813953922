"""
Adapter registry — dispatch point between the runner and adapters.

The runner hands every action to the registry, which picks the adapter
named by the action, validates, honours dry-run and stamps the elapsed
time on the receipt. Tests register a ``MockAdapter`` under ``"shell"``.
"""

from __future__ import annotations

import logging
import time

from dockprep.adapters.base import Adapter, ExecutionContext
from dockprep.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters keyed by name; resolves and runs actions."""

    def __init__(self) -> None:
        self._adapters: dict[str, Adapter] = {}

    @classmethod
    def default(cls) -> AdapterRegistry:
        """A registry wired to the real shell adapter."""
        from dockprep.adapters.shell.command import ShellCommandAdapter

        registry = cls()
        registry.register(ShellCommandAdapter())
        return registry

    def register(self, adapter: Adapter) -> None:
        """Register an adapter, replacing any with the same name."""
        if adapter.name in self._adapters:
            logger.debug("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def execute_action(
        self,
        action: Action,
        project_root: str = ".",
        dry_run: bool = False,
    ) -> Receipt:
        """Run ``action`` through its adapter and return the Receipt.

        Never raises: an unknown adapter or a failed validation comes
        back as a failed receipt, a dry run as a skipped one.
        """
        start = time.monotonic()
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, project_root=project_root, dry_run=dry_run)
        valid, reason = adapter.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {reason}",
            )

        if dry_run:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would execute: {action.id}",
                metadata={"dry_run": True},
            )

        receipt = adapter.execute(context)
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt
