"""
DDEV project discovery — which environments already exist on this machine.
"""

from __future__ import annotations

import logging

from eddev.adapters.registry import AdapterRegistry
from eddev.core.models.environment import DdevProject

logger = logging.getLogger(__name__)


class DdevProjects:
    """Queries ``ddev describe`` / ``ddev list`` through the registry."""

    def __init__(self, registry: AdapterRegistry):
        self._registry = registry

    def describe(self, name: str) -> DdevProject | None:
        """Details of the named project, or None if DDEV doesn't know it."""
        receipt = self._registry.run(
            f"ddev:describe:{name}", "ddev", operation="describe", project=name,
        )
        raw = receipt.metadata.get("raw")
        if not receipt.ok or not isinstance(raw, dict):
            return None
        return _project_from_raw(raw)

    def exists(self, name: str) -> bool:
        return self.describe(name) is not None

    def list_projects(self) -> list[DdevProject]:
        """All projects DDEV knows about (empty if ddev can't be queried)."""
        receipt = self._registry.run("ddev:list", "ddev", operation="list")
        if not receipt.ok:
            logger.warning("Could not list DDEV projects: %s", receipt.error)
            return []
        raw = receipt.metadata.get("raw") or []
        return [_project_from_raw(item) for item in raw if isinstance(item, dict) and item.get("name")]


def _project_from_raw(raw: dict) -> DdevProject:
    return DdevProject(
        name=raw.get("name", ""),
        approot=raw.get("approot", ""),
        primary_url=raw.get("primary_url", ""),
        status=raw.get("status", ""),
    )
