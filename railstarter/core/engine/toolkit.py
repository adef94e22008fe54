"""
Toolkit — the primitives installers are written in.

Each primitive builds an Action, dispatches it through the adapter
registry and reads back the Receipt. Reads of the project tree
(exists, read, glob) go straight to the filesystem: they are pure and
the idempotency guards depend on them seeing the live tree.

Failures of mandatory steps become exceptions here, at the one seam
where a Receipt turns into control flow:

    CommandFailed    — a command or file edit the feature cannot do without failed
    ToolUnavailable  — a capability probe failed (generator/tool missing)
"""

from __future__ import annotations

import itertools
import logging
import shlex
from pathlib import Path
from typing import Any

from railstarter.adapters.mock import MockAdapter
from railstarter.adapters.registry import AdapterRegistry
from railstarter.adapters.shell.command import ShellCommandAdapter
from railstarter.adapters.shell.filesystem import FilesystemAdapter
from railstarter.adapters.vcs.git import GitAdapter
from railstarter.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

ROUTES_ANCHOR = "Rails.application.routes.draw do\n"
APPLICATION_ANCHOR = "class Application < Rails::Application\n"
ENVIRONMENT_ANCHOR = "Rails.application.configure do\n"


class StarterError(Exception):
    """Base class for errors raised while installing a feature."""


class CommandFailed(StarterError):
    """A mandatory command or file operation failed."""

    def __init__(self, command: str, error: str | None = None):
        self.command = command
        self.error = error or "unknown error"
        super().__init__(f"{command}: {self.error}")


class ToolUnavailable(StarterError):
    """A generator or external tool needed by a sub-step is not available."""


def default_registry(mock_mode: bool = False) -> AdapterRegistry:
    """Registry wired with the real shell, filesystem and git adapters.

    In mock mode every action succeeds without touching anything.
    """
    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    registry.register(GitAdapter())
    return registry


def mock_registry() -> AdapterRegistry:
    """Real filesystem, mocked shell and git. Used by ``--mock`` runs of a single feature."""
    registry = AdapterRegistry()
    registry.register(MockAdapter("shell"))
    registry.register(FilesystemAdapter())
    registry.register(MockAdapter("git"))
    return registry


class Toolkit:
    """Receipt-producing primitives bound to one Rails project root."""

    def __init__(
        self,
        registry: AdapterRegistry,
        project_root: Path,
        dry_run: bool = False,
        operation_id: str = "op",
    ):
        self.registry = registry
        self.root = Path(project_root)
        self.dry_run = dry_run
        self.operation_id = operation_id
        self.feature: str | None = None
        self.receipts: list[Receipt] = []
        self._seq = itertools.count(1)

    # ── Dispatch ────────────────────────────────────────────────

    def _dispatch(self, adapter: str, name: str, **params: Any) -> Receipt:
        action = Action(
            id=f"{self.operation_id}:{next(self._seq)}",
            name=name,
            adapter=adapter,
            params=params,
            for_feature=self.feature,
        )
        receipt = self.registry.execute_action(
            action=action,
            project_root=str(self.root),
            dry_run=self.dry_run,
        )
        self.receipts.append(receipt)

        status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info(
            "%s %s %s → %s",
            status_marker,
            self.feature or "baseline",
            name,
            receipt.status if receipt.ok else (receipt.error or receipt.output or receipt.status),
        )
        return receipt

    def _file_op(self, operation: str, path: str, **params: Any) -> bool:
        receipt = self._dispatch(
            "filesystem", f"{operation} {path}", operation=operation, path=path, **params,
        )
        if receipt.failed:
            raise CommandFailed(f"{operation} {path}", receipt.error)
        if receipt.metadata.get("anchor_missing"):
            logger.warning("%s: %s, left unchanged", path, receipt.output)
        return receipt.changed

    # ── Reads (pure) ────────────────────────────────────────────

    def path(self, relative: str) -> Path:
        return self.root / relative

    def exists(self, relative: str) -> bool:
        return self.path(relative).exists()

    def read(self, relative: str) -> str:
        target = self.path(relative)
        return target.read_text(encoding="utf-8") if target.is_file() else ""

    def contains(self, relative: str, text: str) -> bool:
        return text in self.read(relative)

    def glob(self, pattern: str) -> list[Path]:
        return sorted(self.root.glob(pattern))

    # ── Shell ───────────────────────────────────────────────────

    def run(self, command: str, check: bool = True, **params: Any) -> Receipt:
        """Run a shell command in the project root.

        Raises:
            CommandFailed: If the command fails and ``check`` is set.
        """
        receipt = self._dispatch("shell", command, command=command, **params)
        if receipt.failed and check:
            raise CommandFailed(command, receipt.error)
        return receipt

    def probe(self, command: str) -> bool:
        """Whether ``command`` succeeds. A dry-run skip counts as available."""
        return not self.run(command, check=False).failed

    def require(self, command: str, tool: str) -> None:
        """Raise ToolUnavailable unless the probe ``command`` succeeds."""
        if not self.probe(command):
            raise ToolUnavailable(f"{tool} is not available (probe failed: {command})")

    def rails(self, args: str, check: bool = True) -> Receipt:
        return self.run(f"bin/rails {args}", check=check)

    def generate(self, *args: str, check: bool = True) -> Receipt:
        return self.rails("generate " + " ".join(args), check=check)

    def migrate(self) -> Receipt:
        return self.rails("db:migrate")

    def download(self, url: str, destination: str) -> Receipt:
        return self.run(f"curl -fsSL {shlex.quote(url)} > {shlex.quote(destination)}")

    # ── File edits ──────────────────────────────────────────────

    def write_file(self, path: str, content: str, overwrite: bool = False) -> bool:
        return self._file_op("write", path, content=content, overwrite=overwrite)

    def append_file(self, path: str, content: str) -> bool:
        return self._file_op("append", path, content=content)

    def inject_into_file(
        self,
        path: str,
        content: str,
        after: str | None = None,
        before: str | None = None,
    ) -> bool:
        if after is None and before is None:
            raise ValueError("inject_into_file needs after= or before=")
        anchor = {"after": after} if after is not None else {"before": before}
        return self._file_op("inject", path, content=content, **anchor)

    def gsub_file(self, path: str, pattern: str, replacement: str, regex: bool = False) -> bool:
        return self._file_op("gsub", path, pattern=pattern, replacement=replacement, regex=regex)

    def remove(self, path: str) -> bool:
        return self._file_op("remove", path)

    def touch(self, path: str) -> bool:
        return self._file_op("touch", path)

    def mkdir(self, path: str) -> bool:
        return self._file_op("mkdir", path)

    # ── Rails file conventions ──────────────────────────────────

    def route(self, line: str) -> bool:
        """Add a route line at the top of the routes block."""
        return self.inject_into_file("config/routes.rb", f"  {line}\n", after=ROUTES_ANCHOR)

    def environment(self, content: str, env: str | None = None) -> bool:
        """Add configuration to application.rb, or to one environment file."""
        indent = "    " if env is None else "  "
        body = "".join(f"{indent}{line}\n" if line.strip() else "\n" for line in content.splitlines())
        if env is None:
            return self.inject_into_file("config/application.rb", body, after=APPLICATION_ANCHOR)
        return self.inject_into_file(
            f"config/environments/{env}.rb", body, after=ENVIRONMENT_ANCHOR,
        )

    # ── Git ─────────────────────────────────────────────────────

    def git_init(self) -> Receipt:
        receipt = self._dispatch("git", "git init", operation="init")
        if receipt.failed:
            raise CommandFailed("git init", receipt.error)
        return receipt

    def checkpoint(self, message: str) -> bool:
        """Commit everything. A clean tree logs a warning and returns False."""
        receipt = self._dispatch("git", f"commit {message!r}", operation="commit", message=message)
        if receipt.failed:
            raise CommandFailed(f"git commit -m {message!r}", receipt.error)
        if receipt.status == "skipped":
            logger.warning("Checkpoint %r: %s", message, receipt.output or "nothing to commit")
            return False
        return True
