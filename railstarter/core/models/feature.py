"""
Feature models — keys, execution mode, marker rules and install results.

A feature is an optional, independently installable piece of starter
functionality. Its identity is a string key; its installation outcome
is an InstallResult, never an exception.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field

# Every key that can be overridden from the environment (KEY.upper()).
# "css" and "auth" gate the two choice groups.
FEATURE_KEYS: tuple[str, ...] = (
    "css",
    "bootstrap",
    "tailwind",
    "auth",
    "devise",
    "authentication",
    "admin",
    "dev_tools",
    "friendly_urls",
    "image_uploading_cloudinary",
    "navbar",
    "pagination",
    "ruby_llm",
    "security",
    "testing",
)


class ExecutionMode(StrEnum):
    """How an installer was invoked."""

    STANDALONE = "standalone"   # applied directly to an existing project
    EMBEDDED = "embedded"       # step of an orchestrated `new` run


class MarkerRule(BaseModel):
    """The defining artifacts of an installed feature.

    Every populated field must hold for the feature to count as
    installed. ``files_any_of`` is the one disjunctive check: at least
    one of its paths must exist.

    Paths and globs are relative to the project root.
    """

    files_all_of: list[str] = Field(default_factory=list)
    files_any_of: list[str] = Field(default_factory=list)
    globs_all_of: list[str] = Field(default_factory=list)
    manifest_all_of: list[str] = Field(default_factory=list)
    content_contains: dict[str, str] = Field(default_factory=dict)
    # e.g. {"app/views/layouts/application.html.erb": 'render "shared/navbar"'}

    @property
    def empty(self) -> bool:
        return not (
            self.files_all_of
            or self.files_any_of
            or self.globs_all_of
            or self.manifest_all_of
            or self.content_contains
        )


class InstallResult(BaseModel):
    """Outcome of one installer run: installed, skipped or aborted."""

    feature: str
    status: Literal["installed", "skipped", "aborted"] = "installed"
    reason: str = ""
    mode: ExecutionMode = ExecutionMode.STANDALONE
    notices: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    @property
    def installed(self) -> bool:
        return self.status == "installed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def aborted(self) -> bool:
        return self.status == "aborted"

    @classmethod
    def done(cls, feature: str, **kwargs: Any) -> InstallResult:
        """Create an installed result."""
        return cls(feature=feature, status="installed", **kwargs)

    @classmethod
    def skip(cls, feature: str, reason: str, **kwargs: Any) -> InstallResult:
        """Create a skipped result (already installed or not applicable)."""
        return cls(feature=feature, status="skipped", reason=reason, **kwargs)

    @classmethod
    def abort(cls, feature: str, reason: str, **kwargs: Any) -> InstallResult:
        """Create an aborted result."""
        return cls(feature=feature, status="aborted", reason=reason, **kwargs)
