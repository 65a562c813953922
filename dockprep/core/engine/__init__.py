"""Command execution engine."""

from dockprep.core.engine.runner import ProcessRunner, normalize_command

__all__ = ["ProcessRunner", "normalize_command"]
