"""
Feature installer — the state machine every optional feature follows.

    ENTRY → GUARD_CHECK ─┬─ installed ──────────────────────────→ SKIPPED
                         └─ PREREQUISITES ─┬─ missing ─────────→ ABORTED
                                           └─ DEPENDENCY_ENSURE
                                              → ARTIFACT_WRITE (each guarded)
                                              → MODE_CHECK ─┬─ standalone → db:migrate
                                                            └─ embedded   → deferred
                                              → DONE

An installer is invoked either standalone (``railstarter feature apply``
against an existing project) or embedded (a step of ``railstarter new``,
after the one batch ``bundle install``). The mode is passed in
explicitly; nothing is inferred from the call stack.

Subclasses declare their identity, dependencies and marker rule as
class attributes and implement ``write_artifacts``.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from railstarter.core.engine.toolkit import (
    CommandFailed,
    StarterError,
    Toolkit,
    ToolUnavailable,
)
from railstarter.core.models.config import StarterConfig
from railstarter.core.models.feature import ExecutionMode, InstallResult, MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency
from railstarter.core.services import markers

if TYPE_CHECKING:
    from railstarter.core.services.ledger import DependencyLedger

logger = logging.getLogger(__name__)


class PrerequisiteMissing(StarterError):
    """Another feature this one builds on is not installed."""


@dataclass(frozen=True)
class Placement:
    """A block of gems declared together at one Gemfile anchor."""

    deps: tuple[Dependency, ...]
    before: str | None = None
    after: str | None = None


def gems(*names: str, **options: str | bool) -> tuple[Dependency, ...]:
    """Shorthand for unconstrained dependencies sharing the same options."""
    return tuple(Dependency(name=name, options=dict(options)) for name in names)


class FeatureInstaller(ABC):
    """Base class for one optional feature."""

    key: ClassVar[str]
    title: ClassVar[str]
    commit_message: ClassVar[str]
    marker: ClassVar[MarkerRule]

    # Gemfile blocks, in declaration order
    dependencies: ClassVar[tuple[Placement, ...]] = ()

    # Gem whose declaration means "install me"; None = request marker
    trigger: ClassVar[str | None] = None

    runs_migrations: ClassVar[bool] = True

    def __init__(
        self,
        toolkit: Toolkit,
        ledger: DependencyLedger,
        config: StarterConfig,
        mode: ExecutionMode = ExecutionMode.STANDALONE,
    ):
        self.toolkit = toolkit
        self.ledger = ledger
        self.config = config
        self.mode = mode
        self.notices: list[str] = []

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} key={self.key!r} mode={self.mode}>"

    @property
    def root(self) -> Path:
        return self.toolkit.root

    @property
    def css_framework(self) -> str | None:
        """The CSS framework on disk at the moment of asking."""
        return markers.detect_css_framework(self.root)

    # ── Queries ─────────────────────────────────────────────────

    def is_installed(self) -> bool:
        return markers.is_installed(self.marker, self.root)

    def is_requested(self) -> bool:
        return self.ledger.is_requested(self.key, self.trigger)

    def not_applicable(self) -> str | None:
        """Reason this feature should be skipped even though it is not installed."""
        return None

    def check_prerequisites(self) -> None:
        """Raise PrerequisiteMissing when a feature this one needs is absent."""

    # ── Dependencies ────────────────────────────────────────────

    @classmethod
    def declare_dependencies(
        cls,
        ledger: DependencyLedger,
        constraints: dict[str, str] | None = None,
    ) -> list[str]:
        """Write this feature's gem lines into the Gemfile.

        The single place a feature's gems and anchors are defined; the
        selection phase calls it too. ``constraints`` overrides version
        constraints by gem name (the Devise version choice).
        """
        constraints = constraints or {}
        added: list[str] = []
        for placement in cls.dependencies:
            deps = [
                dep.model_copy(update={"constraint": constraints[dep.name]})
                if dep.name in constraints else dep
                for dep in placement.deps
            ]
            added += ledger.declare_many(deps, before=placement.before, after=placement.after)
        return added

    def ensure_dependencies(self) -> list[str]:
        added = self.declare_dependencies(self.ledger)
        if added and self.mode is ExecutionMode.STANDALONE:
            self.notice(f"Added {', '.join(added)} to the Gemfile")
            self.ledger.install_if_stale()
        return added

    # ── Artifacts ───────────────────────────────────────────────

    @abstractmethod
    def write_artifacts(self) -> None:
        """Write every artifact of the feature, each one guarded."""

    def run_if_available(self, probe: str, command: str, tool: str) -> bool:
        """Run ``command`` if ``probe`` succeeds; otherwise warn and move on."""
        try:
            self.toolkit.require(probe, tool)
        except ToolUnavailable as e:
            self.warn(f"{e}. Run `bundle install` first, then re-apply {self.key}.")
            return False
        self.toolkit.run(command)
        return True

    def notice(self, message: str) -> None:
        self.notices.append(message)
        logger.info("[%s] %s", self.key, message)

    def warn(self, message: str) -> None:
        self.notices.append(f"warning: {message}")
        logger.warning("[%s] %s", self.key, message)

    # ── State machine ───────────────────────────────────────────

    def install(self) -> InstallResult:
        """Run the feature's state machine. Never raises for expected failures."""
        start = time.monotonic()
        self.toolkit.feature = self.key
        try:
            result = self._install()
        finally:
            self.toolkit.feature = None
        result.duration_ms = int((time.monotonic() - start) * 1000)
        return result

    def _install(self) -> InstallResult:
        common = {"mode": self.mode, "notices": self.notices}

        if self.is_installed():
            self.notice(f"{self.title} already installed, skipping")
            self._settle_request()
            return InstallResult.skip(self.key, "already installed", **common)

        reason = self.not_applicable()
        if reason:
            self.notice(reason)
            self._settle_request()
            return InstallResult.skip(self.key, reason, **common)

        try:
            self.check_prerequisites()
        except PrerequisiteMissing as e:
            logger.error("[%s] %s", self.key, e)
            return InstallResult.abort(self.key, str(e), **common)

        try:
            self.ensure_dependencies()
            self.write_artifacts()
            self._migrations()
            self._settle_request()
        except StarterError as e:
            logger.error("[%s] aborted: %s", self.key, e)
            return InstallResult.abort(self.key, str(e), **common)

        logger.info("[%s] %s installation complete", self.key, self.title)
        return InstallResult.done(self.key, **common)

    def _settle_request(self) -> None:
        """Drop the request marker of a gem-less feature once it is installed or skipped."""
        if self.trigger is not None or not self.ledger.is_requested(self.key):
            return
        try:
            self.ledger.clear_request(self.key)
        except StarterError as e:
            self.warn(f"Could not clear the {self.key} request: {e}")

    def _migrations(self) -> None:
        if not self.runs_migrations:
            return
        if self.mode is ExecutionMode.STANDALONE:
            self.notice("Standalone mode, running db:migrate")
            self.toolkit.migrate()
        else:
            self.notice("Migrations deferred to the end of the run")


__all__ = [
    "CommandFailed",
    "FeatureInstaller",
    "Placement",
    "PrerequisiteMissing",
    "StarterError",
    "ToolUnavailable",
    "gems",
]
