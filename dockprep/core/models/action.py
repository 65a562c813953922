"""
Action and Receipt models — the execution contract.

An Action is one external command the runner wants executed. A Receipt is
what came back. Adapters return Receipts and never raise; the runner
decides whether a failed Receipt becomes an exception.
"""

from __future__ import annotations

import shlex
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A single external command invocation.

    The id is the shell-quoted command line, which keeps receipts and
    logs readable and lets test doubles key responses on the command.
    """

    id: str
    adapter: str = "shell"
    command: list[str]
    env: dict[str, str] = Field(default_factory=dict)
    cwd: str | None = None
    capture: bool = False           # collect stdout instead of streaming it
    replace: bool = False           # exec in place of the current process

    @classmethod
    def for_command(
        cls,
        command: list[str],
        env: dict[str, str] | None = None,
        cwd: str | None = None,
        capture: bool = False,
        adapter: str = "shell",
        replace: bool = False,
    ) -> Action:
        """Build an action whose id is the quoted command line."""
        return cls(
            id=shlex.join(command),
            adapter=adapter,
            command=list(command),
            env=dict(env or {}),
            cwd=cwd,
            capture=capture,
            replace=replace,
        )


class Receipt(BaseModel):
    """Result of executing an Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the action succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the action failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        kwargs.setdefault("return_code", 0)
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        return_code: int = 1,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            return_code=return_code,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        adapter: str,
        action_id: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="skipped",
            output=reason,
            **kwargs,
        )
