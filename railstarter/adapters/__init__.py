"""Adapters — bindings for the shell, the project tree and git.

Public re-exports for convenient access.
"""

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.adapters.mock import MockAdapter
from railstarter.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
