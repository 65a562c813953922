"""Shell adapters — real process execution."""

from dockprep.adapters.shell.command import ShellCommandAdapter

__all__ = ["ShellCommandAdapter"]
