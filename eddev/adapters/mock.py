"""
Mock adapter — universal test double for every tool invocation.

Used in mock mode to simulate ddev, composer, git and filesystem calls
without touching external tools. Configurable per action ID to fail,
return a canned receipt, or run a side effect first.
"""

from __future__ import annotations

from collections.abc import Callable

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.core.models.action import Receipt


class MockAdapter(Adapter):
    """Universal mock adapter for testing.

    By default, returns success for everything.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._side_effects: dict[str, Callable[[ExecutionContext], None]] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_ids(self) -> list[str]:
        """Action IDs in the order they were executed."""
        return [ctx.action.id for ctx in self._call_log]

    def calls_for(self, action_id: str) -> list[ExecutionContext]:
        return [ctx for ctx in self._call_log if ctx.action.id == action_id]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        """Set a custom response for a specific action ID."""
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
        )

    def set_side_effect(self, action_id: str, effect: Callable[[ExecutionContext], None]) -> None:
        """Run ``effect`` whenever ``action_id`` executes (before responding)."""
        self._side_effects[action_id] = effect

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        effect = self._side_effects.get(context.action.id)
        if effect is not None:
            effect(context)

        if context.action.id in self._responses:
            return self._responses[context.action.id].model_copy(deep=True)

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )
