"""Domain models — pydantic types shared by the engine, services and CLI."""

from railstarter.core.models.action import Action, Receipt
from railstarter.core.models.config import StarterConfig
from railstarter.core.models.feature import (
    FEATURE_KEYS,
    ExecutionMode,
    InstallResult,
    MarkerRule,
)
from railstarter.core.models.manifest import Dependency, Manifest

__all__ = [
    "FEATURE_KEYS",
    "Action",
    "Dependency",
    "ExecutionMode",
    "InstallResult",
    "Manifest",
    "MarkerRule",
    "Receipt",
    "StarterConfig",
]
