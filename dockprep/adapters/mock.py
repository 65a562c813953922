"""
Mock adapter — test double for the shell adapter.

Records every action it receives and answers with success unless told
otherwise. Responses are keyed by action id, which is the quoted command
line (``"bundle install"``, ``"rake --tasks '^assets:precompile$'"``).
"""

from __future__ import annotations

from dockprep.adapters.base import Adapter, ExecutionContext
from dockprep.core.models.action import Receipt


class MockAdapter(Adapter):
    """Stands in for the shell adapter in tests.

    Every command succeeds with empty output unless ``set_output`` or
    ``set_failure`` was called for its action id.
    """

    def __init__(
        self,
        adapter_name: str = "shell",
    ):
        self._name = adapter_name
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times execute has been called."""
        return len(self._call_log)

    @property
    def commands(self) -> list[list[str]]:
        """The argv of every executed action, in order."""
        return [ctx.action.command for ctx in self._call_log]

    def env_for(self, action_id: str) -> dict[str, str] | None:
        """Environment overrides the given command ran with, if it ran."""
        for ctx in self._call_log:
            if ctx.action.id == action_id:
                return ctx.action.env
        return None

    def set_output(self, action_id: str, output: str) -> None:
        """Configure the stdout a captured command returns."""
        self._responses[action_id] = Receipt.success(
            adapter=self._name,
            action_id=action_id,
            output=output,
        )

    def set_failure(
        self,
        action_id: str,
        error: str = "Mock failure",
        return_code: int = 1,
    ) -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
            return_code=return_code,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action.id in self._responses:
            return self._responses[context.action.id]

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output="",
            metadata={"mock": True},
        )
