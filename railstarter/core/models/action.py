"""
Action / Receipt — what the toolkit asks an adapter to do, and what happened.

An Action is one side effect on the Rails project: a ``bin/rails``
command, a Gemfile edit, a git commit. A Receipt is its outcome, and
adapters report failure through it rather than by raising.

``metadata["changed"]`` distinguishes an edit that modified the tree
from one that found its content already in place; idempotent
installers depend on that distinction.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One requested side effect."""

    id: str                         # "<operation id>:<sequence>"
    adapter: str                    # shell | filesystem | git
    name: str = ""                  # what gets logged: the command, or "inject config/routes.rb"
    params: dict[str, Any] = Field(default_factory=dict)
    for_feature: str | None = None  # None while running the baseline steps


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def changed(self) -> bool:
        """Whether the project tree was modified. Commands count as changes."""
        return self.ok and bool(self.metadata.get("changed", True))

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Nothing to do: already in place, nothing to commit, or a dry run."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
