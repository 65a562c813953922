"""
Adapter base — the protocol contract between the runner and processes.

The runner never calls ``subprocess`` itself. It hands an Action to an
adapter and gets a Receipt back, which keeps every command substitutable
by a test double.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from pydantic import BaseModel

from dockprep.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    project_root: str = "."
    dry_run: bool = False

    @property
    def working_dir(self) -> str:
        """Resolved working directory for the action."""
        if self.action.cwd:
            return os.path.join(self.project_root, self.action.cwd)
        return self.project_root


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
