"""Adapters — process execution backends.

Public re-exports for convenient access.
"""

from dockprep.adapters.base import Adapter, ExecutionContext
from dockprep.adapters.mock import MockAdapter
from dockprep.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
