"""
Adapter base — the seam between installers and the outside world.

Three adapters cover every side effect of a run: ``shell`` (Rails,
Bundler, curl), ``filesystem`` (edits inside the project tree) and
``git`` (checkpoints). A fourth, ``MockAdapter``, stands in for shell
and git in tests and ``--mock`` runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field

from railstarter.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An action bound to the Rails project it runs in."""

    action: Action
    project_root: str = "."
    subdir: str | None = None
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        if self.subdir:
            return str(PurePosixPath(self.project_root, self.subdir))
        return self.project_root


class Adapter(ABC):
    """One kind of side effect.

    ``execute`` reports every failure through the returned Receipt;
    the registry still guards against adapters that raise.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Value of ``Action.adapter`` this adapter handles."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool exists on this machine."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """``(True, "")``, or ``(False, reason)`` to refuse the action unexecuted."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
