"""
Idempotency guard — decide whether a feature is already installed.

Looks at the project's filesystem and Gemfile and evaluates a feature's
MarkerRule against them. Every populated rule field must hold; a
feature with only some of its artifacts present is not installed.

Pure logic — reads only, no side effects.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

CssFramework = Literal["bootstrap", "tailwind"]

BOOTSTRAP_STYLESHEETS = "app/assets/stylesheets/*bootstrap*"
TAILWIND_CONFIGS = ("config/tailwind.config.js", "app/assets/tailwind/application.css")


def _read_manifest(root: Path) -> Manifest:
    gemfile = root / "Gemfile"
    text = gemfile.read_text(encoding="utf-8") if gemfile.is_file() else ""
    return Manifest.parse(text)


def is_installed(rule: MarkerRule, root: Path, manifest: Manifest | None = None) -> bool:
    """Evaluate ``rule`` against the project at ``root``.

    Checks, conjunctively:
    - files_all_of: all must exist
    - files_any_of: at least one must exist
    - globs_all_of: every glob must match something
    - manifest_all_of: every gem must be declared in the Gemfile
    - content_contains: each file must contain its string

    An empty rule never matches.
    """
    if rule.empty:
        return False

    if rule.files_all_of and not all((root / f).exists() for f in rule.files_all_of):
        return False

    if rule.files_any_of and not any((root / f).exists() for f in rule.files_any_of):
        return False

    for pattern in rule.globs_all_of:
        if not any(root.glob(pattern)):
            return False

    if rule.manifest_all_of:
        manifest = manifest or _read_manifest(root)
        if not all(manifest.has(name) for name in rule.manifest_all_of):
            return False

    for filename, needle in rule.content_contains.items():
        target = root / filename
        if not target.is_file():
            return False
        try:
            if needle not in target.read_text(encoding="utf-8"):
                return False
        except OSError as e:
            logger.debug("Cannot read %s: %s", target, e)
            return False

    return True


def detect_css_framework(root: Path) -> CssFramework | None:
    """Which CSS framework the project uses right now.

    Probed from the filesystem every time it is asked, so an installer
    running after the styling installers sees what they actually wrote.
    """
    if any(root.glob(BOOTSTRAP_STYLESHEETS)):
        return "bootstrap"
    if any((root / f).exists() for f in TAILWIND_CONFIGS):
        return "tailwind"
    return None
