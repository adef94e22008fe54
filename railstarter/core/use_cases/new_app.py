"""
New-app use case — turn a freshly generated Rails app into a starter app.

Flow (strictly linear):
    kill spring → baseline → selection → ONE bundle install
    → post-install baseline + initial commit
    → each requested installer (embedded) + its checkpoint
    → db:migrate db:seed + final commit

Every feature's outcome is recorded in the audit ledger. A failed
feature never stops the run; a failed bundle install does, because no
generator can load without it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from railstarter.adapters.registry import AdapterRegistry
from railstarter.core.engine.toolkit import StarterError, Toolkit, default_registry
from railstarter.core.models.config import StarterConfig
from railstarter.core.models.feature import ExecutionMode, InstallResult
from railstarter.core.persistence.audit import AuditEntry, AuditWriter
from railstarter.core.services import baseline
from railstarter.core.services.catalog import Selection, select_features
from railstarter.core.services.installers import INSTALL_ORDER
from railstarter.core.services.ledger import DependencyLedger
from railstarter.core.services.selector import ClickPrompter, FeatureSelector, Prompter

logger = logging.getLogger(__name__)

FINAL_COMMIT = "feat: add migration after initial setup."


@dataclass
class NewAppResult:
    """Result of a ``railstarter new`` run."""

    operation_id: str = ""
    project_root: Path | None = None
    template: str = "custom"
    selection: Selection | None = None
    results: list[InstallResult] = field(default_factory=list)
    checkpoints: list[str] = field(default_factory=list)
    install_count: int = 0
    error: str | None = None

    def result_for(self, feature: str) -> InstallResult | None:
        for result in self.results:
            if result.feature == feature:
                return result
        return None

    @property
    def installed(self) -> list[str]:
        return [r.feature for r in self.results if r.installed]

    @property
    def aborted(self) -> list[str]:
        return [r.feature for r in self.results if r.aborted]

    def to_dict(self) -> dict:
        data: dict = {
            "operation_id": self.operation_id,
            "project_root": str(self.project_root) if self.project_root else None,
            "template": self.template,
            "selection": self.selection.to_dict() if self.selection else None,
            "results": [r.model_dump(mode="json") for r in self.results],
            "checkpoints": self.checkpoints,
            "install_count": self.install_count,
        }
        if self.error:
            data["error"] = self.error
        return data


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


def run_new_app(
    config: StarterConfig,
    registry: AdapterRegistry | None = None,
    prompter: Prompter | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
) -> NewAppResult:
    """Run the full starter setup against ``config.project_root``.

    Args:
        config: Resolved configuration (project root, template, overrides).
        registry: Optional pre-configured adapter registry.
        prompter: How to ask questions (default: the terminal).
        dry_run: Validate every action but execute none.
        mock_mode: Answer every action with success, touching nothing.

    Returns:
        NewAppResult; ``error`` is set when the run had to stop.
    """
    root = Path(config.project_root)
    result = NewAppResult(
        operation_id=generate_operation_id(),
        project_root=root,
        template=config.template,
    )

    if registry is None:
        registry = default_registry(mock_mode=mock_mode)

    toolkit = Toolkit(registry, root, dry_run=dry_run, operation_id=result.operation_id)
    ledger = DependencyLedger(toolkit)
    selector = FeatureSelector(config.overrides, prompter or ClickPrompter())
    audit = AuditWriter(project_root=root) if config.audit and not dry_run else None

    # ── 1-2. Baseline ────────────────────────────────────────────
    baseline.kill_spring(toolkit)
    try:
        baseline.pre_install(toolkit, ledger, config)
    except StarterError as e:
        result.error = f"Baseline setup failed: {e}"
        return result

    # ── 3. Selection ─────────────────────────────────────────────
    result.selection = select_features(selector, ledger, template=config.template)

    # ── 4. The one batch dependency install ──────────────────────
    try:
        ledger.install_if_stale()
    except StarterError as e:
        result.error = f"Dependency installation failed: {e}"
        return result
    finally:
        result.install_count = ledger.install_count

    # ── 5. Post-install baseline + initial commit ────────────────
    try:
        committed = baseline.post_install(toolkit, ledger, config)
    except StarterError as e:
        result.error = f"Post-install setup failed: {e}"
        return result
    if committed:
        result.checkpoints.append("initial commit")

    # ── 6. Requested features, in dependency order ───────────────
    for installer_cls in INSTALL_ORDER:
        installer = installer_cls(toolkit, ledger, config, mode=ExecutionMode.EMBEDDED)
        if not installer.is_requested():
            continue

        try:
            outcome = installer.install()
        except Exception as e:
            # One feature's crash must not take down the features after it
            logger.exception("[%s] unexpected error", installer.key)
            outcome = InstallResult.abort(
                installer.key, f"Unexpected error: {e}", mode=ExecutionMode.EMBEDDED,
            )
        result.results.append(outcome)
        _report(outcome)

        if audit is not None:
            audit.write(AuditEntry.from_result(outcome, result.operation_id, "new"))

        if outcome.installed:
            try:
                if toolkit.checkpoint(installer.commit_message):
                    result.checkpoints.append(installer.key)
            except StarterError as e:
                logger.error("Checkpoint for %s failed: %s", installer.key, e)

    # ── 7. Deferred migrations + final commit ────────────────────
    try:
        toolkit.rails("db:migrate db:seed")
        if toolkit.checkpoint(FINAL_COMMIT):
            result.checkpoints.append("final")
    except StarterError as e:
        result.error = f"Final migration failed: {e}"

    return result


def _report(outcome: InstallResult) -> None:
    status_marker = "✓" if outcome.installed else "✗" if outcome.aborted else "⊘"
    logger.info("%s %s → %s %s", status_marker, outcome.feature, outcome.status, outcome.reason)
