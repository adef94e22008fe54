"""
Mock adapter — stands in for ``shell`` or ``git`` in tests and ``--mock`` runs.

Every action succeeds unless told otherwise. Responses are matched by
action id first, then by command (or git operation) fragment in the
order they were registered, so register the more specific fragment first
(``"pagy:install --help"`` before ``"pagy:install"``).

Side effects simulate what a generator would have written, e.g.
``add_side_effect("devise:install", creates("config/initializers/devise.rb"))``.
They run only for commands that succeed.
"""

from __future__ import annotations

from collections.abc import Callable

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.core.models.action import Receipt

SideEffect = Callable[[ExecutionContext], None]


class MockAdapter(Adapter):
    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._by_id: dict[str, Receipt] = {}
        self._by_fragment: dict[str, Receipt] = {}
        self._side_effects: list[tuple[str, SideEffect]] = []
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    # ── Inspection ──────────────────────────────────────────────

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def commands(self) -> list[str]:
        """``command`` (shell) or ``operation`` (git) of each call, in order."""
        return [ctx.params.get("command") or ctx.params.get("operation", "") for ctx in self.call_log]

    def ran(self, fragment: str) -> int:
        return sum(fragment in command for command in self.commands)

    # ── Configuration ───────────────────────────────────────────

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._by_id[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self._by_id[action_id] = Receipt.failure(adapter=self._name, action_id=action_id, error=error)

    def set_command_response(self, fragment: str, receipt: Receipt) -> None:
        self._by_fragment[fragment] = receipt

    def set_command_failure(self, fragment: str, error: str = "Mock failure") -> None:
        self._by_fragment[fragment] = Receipt.failure(adapter=self._name, action_id=fragment, error=error)

    def add_side_effect(self, fragment: str, effect: SideEffect) -> None:
        self._side_effects.append((fragment, effect))

    def reset(self) -> None:
        self.call_log.clear()
        self._by_id.clear()
        self._by_fragment.clear()
        self._side_effects.clear()

    # ── Execution ───────────────────────────────────────────────

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action_id = context.action.id
        if action_id in self._by_id:
            return self._by_id[action_id].model_copy()

        command = context.params.get("command") or context.params.get("operation", "")
        receipt = next(
            (r for fragment, r in self._by_fragment.items() if fragment in command),
            None,
        )
        if receipt is None:
            receipt = Receipt.success(
                adapter=self._name, action_id=action_id, output="[mock] executed", metadata={"mock": True},
            )
        else:
            receipt = receipt.model_copy(update={"action_id": action_id})

        if receipt.ok and command:
            for fragment, effect in self._side_effects:
                if fragment in command:
                    effect(context)
        return receipt
