"""
Git adapter — repository init and the checkpoint commits of a run.

A checkpoint is ``git add -A`` followed by ``git commit -m <message>``.
No branches, no push.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.core.models.action import Receipt

logger = logging.getLogger(__name__)

OPERATIONS = ("init", "commit")
NOTHING_TO_COMMIT = "nothing to commit"


class GitFailed(Exception):
    def __init__(self, args: list[str], result: subprocess.CompletedProcess):
        self.result = result
        super().__init__(result.stderr.strip() or f"git {args[0]} exited with code {result.returncode}")


class GitAdapter(Adapter):
    """Action params: ``operation`` (init | commit), ``message`` for commits."""

    def __init__(self, timeout: int = 60):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation")
        if operation not in OPERATIONS:
            return False, f"Unknown git operation {operation!r}. Valid: {', '.join(OPERATIONS)}"
        if operation == "commit" and not context.params.get("message"):
            return False, "A commit needs a 'message'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action_id = context.action.id
        cwd = context.working_dir
        try:
            if context.params["operation"] == "init":
                out = self._git(["init"], cwd)
                return Receipt.success(adapter=self.name, action_id=action_id, output=out)
            return self._commit(context.params["message"], cwd, action_id)
        except GitFailed as e:
            return Receipt.failure(adapter=self.name, action_id=action_id, error=str(e))
        except (OSError, subprocess.SubprocessError) as e:
            return Receipt.failure(adapter=self.name, action_id=action_id, error=f"git error: {e}")

    def _commit(self, message: str, cwd: str, action_id: str) -> Receipt:
        """A clean tree is a skip, not a failure."""
        self._git(["add", "-A"], cwd)
        try:
            out = self._git(["commit", "-m", message], cwd)
        except GitFailed as e:
            combined = f"{e.result.stdout}\n{e.result.stderr}"
            if NOTHING_TO_COMMIT not in combined:
                raise
            logger.debug("Checkpoint %r: clean tree", message)
            return Receipt.skip(
                adapter=self.name,
                action_id=action_id,
                reason=NOTHING_TO_COMMIT,
                metadata={"message": message, "changed": False},
            )
        return Receipt.success(
            adapter=self.name, action_id=action_id, output=out, metadata={"message": message},
        )

    def _git(self, args: list[str], cwd: str) -> str:
        result = subprocess.run(
            ["git", *args], cwd=cwd, capture_output=True, text=True, timeout=self._timeout,
        )
        if result.returncode != 0:
            raise GitFailed(args, result)
        return result.stdout.strip()
