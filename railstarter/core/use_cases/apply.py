"""
Apply use case — install one feature into an existing Rails project.

Standalone mode: the installer declares its own gems, runs ``bundle
install`` when it added any, and runs its migrations itself. No git
checkpoint is made; the working tree is left for the user to review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from railstarter.adapters.registry import AdapterRegistry
from railstarter.core.engine.toolkit import Toolkit, default_registry
from railstarter.core.models.config import StarterConfig
from railstarter.core.models.feature import ExecutionMode, InstallResult
from railstarter.core.persistence.audit import AuditEntry, AuditWriter
from railstarter.core.services.installers import INSTALLERS, get_installer
from railstarter.core.services.ledger import DependencyLedger
from railstarter.core.use_cases.new_app import generate_operation_id

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of ``railstarter feature apply``."""

    feature: str = ""
    operation_id: str = ""
    result: InstallResult | None = None
    actions: list[dict] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None and not self.result.aborted

    def to_dict(self) -> dict:
        data: dict = {
            "feature": self.feature,
            "operation_id": self.operation_id,
            "result": self.result.model_dump(mode="json") if self.result else None,
            "actions": self.actions,
        }
        if self.error:
            data["error"] = self.error
        return data


def apply_feature(
    name: str,
    config: StarterConfig,
    registry: AdapterRegistry | None = None,
    dry_run: bool = False,
) -> ApplyResult:
    """Install feature ``name`` in standalone mode.

    Args:
        name: Feature key (see ``railstarter feature list``).
        config: Resolved configuration.
        registry: Optional pre-configured adapter registry.
        dry_run: Validate every action but execute none.
    """
    result = ApplyResult(feature=name, operation_id=generate_operation_id())

    installer_cls = get_installer(name)
    if installer_cls is None:
        result.error = f"Unknown feature '{name}'. Available: {', '.join(INSTALLERS)}"
        return result

    root = Path(config.project_root)
    toolkit = Toolkit(
        registry or default_registry(),
        root,
        dry_run=dry_run,
        operation_id=result.operation_id,
    )
    ledger = DependencyLedger(toolkit)
    installer = installer_cls(toolkit, ledger, config, mode=ExecutionMode.STANDALONE)

    logger.info("Applying %s to %s", name, root)
    result.result = installer.install()
    result.actions = [
        {"id": r.action_id, "adapter": r.adapter, "status": r.status, "error": r.error}
        for r in toolkit.receipts
    ]

    if config.audit and not dry_run:
        AuditWriter(project_root=root).write(
            AuditEntry.from_result(result.result, result.operation_id, "apply")
        )

    return result
