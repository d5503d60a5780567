"""Adapters — every side effect on ddev, composer, git and the filesystem."""

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.adapters.mock import MockAdapter
from eddev.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
