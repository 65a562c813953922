"""
Shell command adapter — run external commands for real.

Output streams straight to the build log unless the action asks for it
to be captured. There is no timeout: a hung package manager hangs the
build step, which is what a Dockerfile ``RUN`` would do anyway.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from pathlib import Path

from dockprep.adapters.base import Adapter, ExecutionContext
from dockprep.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Exit status a shell reports for "command not found"
_NOT_FOUND_CODE = 127


class ShellCommandAdapter(Adapter):
    """Execute an argv list with optional environment overrides."""

    @property
    def name(self) -> str:
        return "shell"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.command:
            return False, "Missing command"

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        cwd = context.working_dir

        env = os.environ.copy()
        env.update(action.env)

        logger.debug("Executing: %s (cwd=%s, env=%s)", action.id, cwd, sorted(action.env))

        if action.replace and os.name == "posix":
            return self._exec(context, env)

        start = time.monotonic()

        try:
            result = subprocess.run(
                action.command,
                cwd=cwd,
                env=env,
                capture_output=action.capture,
                text=True,
            )
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command not found: {action.command[0]}",
                return_code=_NOT_FOUND_CODE,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr} if stderr else {},
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            return_code=result.returncode,
            output=output,
            duration_ms=elapsed_ms,
        )

    def _exec(self, context: ExecutionContext, env: dict[str, str]) -> Receipt:
        """Replace this process with the command; returns only on failure.

        Signals sent to the container then reach the command directly.
        """
        action = context.action
        for stream in (sys.stdout, sys.stderr):
            stream.flush()
        for handler in logging.getLogger().handlers:
            handler.flush()
        try:
            os.chdir(context.working_dir)
            os.execvpe(action.command[0], action.command, env)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command not found: {action.command[0]}",
                return_code=_NOT_FOUND_CODE,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command execution error: {e}",
            )
        raise AssertionError("os.execvpe returned")
