"""
Error taxonomy — every failure a command can end with.

Nothing here is retried. The CLI turns a ``DockprepError`` into a red
message and a non-zero exit; ``CommandError`` keeps the external
process's own exit status.
"""

from __future__ import annotations

import shlex


class DockprepError(Exception):
    """Base class for all dockprep failures."""

    exit_code: int = 1


class ConfigError(DockprepError):
    """Raised when the application directory is missing required files."""


class CommandError(DockprepError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, detail: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.detail = detail
        message = f"Command failed (exit {returncode}): {shlex.join(self.command)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode if self.returncode > 0 else 1


class ArtifactError(DockprepError):
    """Raised when a path cannot be relocated into the artifacts directory."""
