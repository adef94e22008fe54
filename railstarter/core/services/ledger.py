"""
Dependency ledger — what the project has asked for.

The Gemfile is the ledger of dependency-backed features: declaring a
gem during selection is what later makes its installer run. Features
with no gem of their own (Rails 8 native authentication, the navbar)
are recorded as request markers under ``tmp/railstarter/`` instead,
which Rails keeps out of git.

All writes go through the toolkit so they are receipted and dry-runnable.
"""

from __future__ import annotations

import logging

from railstarter.core.engine.toolkit import Toolkit
from railstarter.core.models.manifest import Dependency, Manifest

logger = logging.getLogger(__name__)

GEMFILE = "Gemfile"
REQUEST_DIR = "tmp/railstarter"


class DependencyLedger:
    """Gemfile declarations plus request markers for one project."""

    def __init__(self, toolkit: Toolkit):
        self.toolkit = toolkit
        self.install_count = 0
        self._text: str | None = None
        self._parsed: Manifest | None = None
        # Only populated in dry-run, where writes never land
        self._pending: dict[str, Dependency] = {}
        self._pending_requests: set[str] = set()

    # ── Reads ───────────────────────────────────────────────────

    def manifest(self) -> Manifest:
        """The Gemfile as it is on disk right now.

        The file is re-read on every call; it is only re-parsed when its
        text changed. Treat the returned manifest as read-only.
        """
        text = self.toolkit.read(GEMFILE)
        if self._parsed is None or text != self._text:
            self._text = text
            self._parsed = Manifest.parse(text)
        return self._parsed

    def is_declared(self, name: str) -> bool:
        return self.manifest().has(name) or name in self._pending

    def find(self, name: str) -> Dependency | None:
        found = self.manifest().find(name)
        return found if found is not None else self._pending.get(name)

    # ── Declarations ────────────────────────────────────────────

    def declare(
        self,
        name: str,
        constraint: str | None = None,
        *,
        options: dict[str, str | bool] | None = None,
        before: str | None = None,
        after: str | None = None,
    ) -> bool:
        """Declare one gem unless it is already declared. Returns whether it was added."""
        dep = Dependency(name=name, constraint=constraint, options=options or {})
        return bool(self.declare_many([dep], before=before, after=after))

    def declare_many(
        self,
        deps: list[Dependency],
        before: str | None = None,
        after: str | None = None,
    ) -> list[str]:
        """Declare a block of gems at one anchor, skipping names already present."""
        deps = [dep for dep in deps if dep.name not in self._pending]
        editable = Manifest.parse(self.toolkit.read(GEMFILE))
        added = editable.insert(deps, before=before, after=after)
        if not added:
            return []

        self.toolkit.write_file(GEMFILE, editable.render(), overwrite=True)
        if self.toolkit.dry_run:
            self._pending.update({dep.name: dep for dep in deps if dep.name in added})
        logger.info("Declared %s", ", ".join(added))
        return added

    def drop(self, name: str) -> bool:
        editable = Manifest.parse(self.toolkit.read(GEMFILE))
        if not editable.drop(name):
            return False
        self.toolkit.write_file(GEMFILE, editable.render(), overwrite=True)
        logger.info("Removed %s from the Gemfile", name)
        return True

    # ── Bundler ─────────────────────────────────────────────────

    def install_if_stale(self) -> bool:
        """Run ``bundle install`` unless ``bundle check`` says nothing is missing.

        Returns whether an install ran.

        Raises:
            CommandFailed: If ``bundle install`` fails.
        """
        self.install_count += 1
        if self.toolkit.probe("bundle check"):
            logger.info("Bundle is up to date")
            return False
        self.toolkit.run("bundle install")
        return True

    # ── Request markers ─────────────────────────────────────────

    def _marker(self, key: str) -> str:
        return f"{REQUEST_DIR}/{key}.requested"

    def request(self, key: str) -> None:
        """Record that a gem-less feature was selected."""
        self.toolkit.touch(self._marker(key))
        if self.toolkit.dry_run:
            self._pending_requests.add(key)

    def is_requested(self, key: str, trigger: str | None = None) -> bool:
        """Whether ``key`` was selected: its marker exists or its trigger gem is declared."""
        if self.toolkit.exists(self._marker(key)) or key in self._pending_requests:
            return True
        return trigger is not None and self.is_declared(trigger)

    def clear_request(self, key: str) -> None:
        self.toolkit.remove(self._marker(key))
        self._pending_requests.discard(key)
