"""
Adapter registry — central dispatch for all tool invocations.

The registry is the single point of adapter management. It handles
registration, lookup, mock mode, and action execution. Services and the
pipeline never talk to adapters directly — always through the registry.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry and dispatcher for adapters.

    Features:
        - Register/unregister adapters by name
        - Mock mode: route every action to a single test double
        - Execute actions through the appropriate adapter
        - Report which tools are missing
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Enable or disable mock mode.

        Args:
            enabled: Whether to use mock mode.
            mock_adapter: Optional custom mock adapter. If None, every
                action succeeds with an empty receipt.
        """
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def missing_tools(self, *names: str) -> list[str]:
        """Names of registered adapters whose tool is not installed."""
        if self._mock_mode:
            return []
        missing = []
        for name in names or tuple(self._adapters):
            adapter = self._adapters.get(name)
            if adapter is None:
                missing.append(name)
                continue
            try:
                available = adapter.is_available()
            except Exception:
                available = False
            if not available:
                missing.append(name)
        return missing

    def run(
        self,
        action_id: str,
        adapter: str,
        *,
        cwd: str | None = None,
        stream: bool = False,
        name: str = "",
        **params: Any,
    ) -> Receipt:
        """Build an Action from keyword params and execute it."""
        action = Action(id=action_id, name=name or action_id, adapter=adapter, params=params)
        return self.execute_action(action, project_root=cwd or ".", stream=stream)

    def execute_action(
        self,
        action: Action,
        project_root: str = ".",
        stream: bool = False,
    ) -> Receipt:
        """Execute an action through the appropriate adapter.

        Resolves the adapter (or mock), validates, executes and times the
        action. Never raises: every failure comes back as a Receipt.
        """
        start_time = time.monotonic()

        context = ExecutionContext(
            action=action,
            project_root=project_root,
            stream=stream,
            params=action.params,
        )

        adapter: Adapter | None = None
        if self._mock_mode and self._mock_adapter:
            adapter = self._mock_adapter
        elif self._mock_mode:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.adapter}:{action.id} executed",
                metadata={"mock": True},
            )
        else:
            adapter = self._adapters.get(action.adapter)

        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            is_valid, error_msg = adapter.validate(context)
            if not is_valid:
                return Receipt.failure(
                    adapter=action.adapter,
                    action_id=action.id,
                    error=f"Validation failed: {error_msg}",
                )
        except Exception as e:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation error: {e}",
            )

        logger.info("→ %s", action.name or action.id)
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        if receipt.failed:
            logger.debug("✗ %s: %s", action.id, receipt.error)

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt


def default_registry() -> AdapterRegistry:
    """Registry wired with every real adapter."""
    from eddev.adapters.containers.ddev import DdevAdapter
    from eddev.adapters.packages.composer import ComposerAdapter
    from eddev.adapters.shell.filesystem import FilesystemAdapter
    from eddev.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    for adapter in (DdevAdapter(), ComposerAdapter(), GitAdapter(), FilesystemAdapter()):
        registry.register(adapter)
    return registry
