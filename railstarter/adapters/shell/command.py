"""
Shell adapter — ``bin/rails``, ``bundle``, ``curl`` and ``pkill``.

Commands are run through ``sh`` in the project root. The receipt keeps
stdout as output and stderr as the error, plus the exit code, so a
failed generator or ``bundle install`` can be reported verbatim.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.core.models.action import Receipt

logger = logging.getLogger(__name__)

# bundle install on a cold cache is slow
DEFAULT_TIMEOUT = 900


class ShellCommandAdapter(Adapter):
    """Action params: ``command``; optional ``cwd``, ``timeout``, ``env``."""

    def __init__(self, default_timeout: int = DEFAULT_TIMEOUT):
        self._default_timeout = default_timeout

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.params.get("command"):
            return False, "Missing required param: 'command'"
        cwd = context.params.get("cwd", context.working_dir)
        if not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command: str = context.params["command"]
        cwd = context.params.get("cwd", context.working_dir)
        timeout = context.params.get("timeout", self._default_timeout)
        env = context.params.get("env")
        meta = {"command": command}

        logger.debug("$ %s  (in %s)", command, cwd)
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                env={**os.environ, **env} if env else None,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Timed out after {timeout}s",
                metadata=meta,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name, action_id=context.action.id, error=str(e), metadata=meta,
            )

        meta["return_code"] = result.returncode
        stdout, stderr = result.stdout.strip(), result.stderr.strip()
        if result.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=stderr or f"exited with code {result.returncode}",
                metadata={**meta, "stdout": stdout},
            )
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=stdout,
            metadata={**meta, "stderr": stderr},
        )
