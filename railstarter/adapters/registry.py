"""
Adapter registry — routes each Action to the adapter named on it.

Installers only ever reach the outside world through here: the toolkit
builds an Action, the registry picks the shell, filesystem or git
adapter, validates, executes and hands back a Receipt. Nothing in this
module raises.

Two run modes bypass real execution:

    mock_mode  every action succeeds with a ``{"mock": True}`` receipt
    dry_run    the action is validated, then skipped
"""

from __future__ import annotations

import logging
import time
from typing import Any

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the dispatch that turns Actions into Receipts."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self.mock_mode = mock_mode

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered %r", adapter)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Whether each registered adapter's tool (git, a shell) is usable here."""
        status: dict[str, dict[str, Any]] = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.is_available()
            except Exception as e:
                logger.debug("Availability check for %s raised: %s", name, e)
                available = False
            status[name] = {"available": available, "type": type(adapter).__name__}
        return status

    # ── Dispatch ────────────────────────────────────────────────

    def execute_action(
        self,
        action: Action,
        project_root: str = ".",
        subdir: str | None = None,
        dry_run: bool = False,
    ) -> Receipt:
        """Run one action in ``project_root`` (or a subdirectory of it).

        Returns:
            The adapter's Receipt; a failed Receipt for an unknown adapter,
            a rejected action or an adapter that raised.
        """
        if self.mock_mode:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.name or action.adapter}",
                metadata={"mock": True, "dry_run": dry_run},
            )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return self._fail(action, f"No adapter registered for '{action.adapter}'")

        context = ExecutionContext(
            action=action,
            project_root=project_root,
            subdir=subdir,
            dry_run=dry_run,
            params=action.params,
        )

        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            return self._fail(action, f"Validation error: {e}")
        if not valid:
            return self._fail(action, f"Validation failed: {reason}")

        if dry_run:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] {action.name or action.id}",
                metadata={"dry_run": True, "changed": False},
            )

        start = time.monotonic()
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("%s adapter raised on %s: %s", action.adapter, action.name or action.id, e)
            receipt = self._fail(action, f"Unexpected error: {e}")
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

    @staticmethod
    def _fail(action: Action, error: str) -> Receipt:
        return Receipt.failure(adapter=action.adapter, action_id=action.id, error=error)
