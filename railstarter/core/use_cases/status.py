"""
Status use case — which features a project has, and which it asked for.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from railstarter.core.engine.toolkit import Toolkit, default_registry
from railstarter.core.models.config import StarterConfig
from railstarter.core.persistence.audit import AuditEntry, AuditWriter
from railstarter.core.services import markers
from railstarter.core.services.installers import INSTALL_ORDER
from railstarter.core.services.ledger import DependencyLedger


@dataclass
class FeatureStatus:
    key: str
    title: str
    installed: bool = False
    requested: bool = False

    @property
    def pending(self) -> bool:
        """Selected but not yet installed."""
        return self.requested and not self.installed


@dataclass
class StatusResult:
    """Per-feature status of one project."""

    project_root: Path | None = None
    rails_version: int | None = None
    css_framework: str | None = None
    features: list[FeatureStatus] = field(default_factory=list)
    recent: list[AuditEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def installed_count(self) -> int:
        return sum(1 for f in self.features if f.installed)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "project_root": str(self.project_root) if self.project_root else None,
            "rails_version": self.rails_version,
            "css_framework": self.css_framework,
            "features": {
                f.key: {"installed": f.installed, "requested": f.requested}
                for f in self.features
            },
            "recent": [e.model_dump(mode="json") for e in self.recent],
        }


def get_status(config: StarterConfig, recent: int = 5) -> StatusResult:
    """Evaluate every feature's marker rule against the project."""
    root = Path(config.project_root)
    result = StatusResult(project_root=root)
    if not root.is_dir():
        result.error = f"Project directory not found: {root}"
        return result

    # Read-only: the toolkit is only used for its filesystem reads
    ledger = DependencyLedger(Toolkit(default_registry(), root))
    result.rails_version = ledger.manifest().rails_major_version()
    result.css_framework = markers.detect_css_framework(root)

    for installer_cls in INSTALL_ORDER:
        result.features.append(FeatureStatus(
            key=installer_cls.key,
            title=installer_cls.title,
            installed=markers.is_installed(installer_cls.marker, root),
            requested=ledger.is_requested(installer_cls.key, installer_cls.trigger),
        ))

    result.recent = AuditWriter(project_root=root).read_recent(recent)
    return result
