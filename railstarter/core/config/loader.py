"""
Configuration loader — finds the Rails project and reads .railstarter.yml.

The config file is optional. Feature overrides come from two places:
the file's ``features:`` mapping and the process environment
(``DEVISE=true``). The environment always wins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from railstarter.core.models.config import StarterConfig
from railstarter.core.models.feature import FEATURE_KEYS

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = ".railstarter.yml"

# Files that identify the root of a Rails application
ROOT_MARKERS = ("Gemfile", "config/application.rb")


class ConfigError(Exception):
    """Raised when the project root or the configuration is invalid."""


def find_project_root(start_dir: Path | None = None) -> Path | None:
    """Search for a Rails project root starting from ``start_dir``, walking up.

    This allows running commands from subdirectories (``app/models``)
    and still finding the project.

    Returns:
        The directory holding Gemfile and config/application.rb, or None.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        if all((current / marker).is_file() for marker in ROOT_MARKERS):
            return current
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def parse_overrides(environ: Mapping[str, str] | None = None) -> dict[str, bool]:
    """Build the override map from environment variables.

    Only the exact strings "true" and "false" count; anything else
    (unset, empty, "1", "yes") leaves the decision to the prompt.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, bool] = {}
    for key in FEATURE_KEYS:
        raw = env.get(key.upper())
        if raw == "true":
            overrides[key] = True
        elif raw == "false":
            overrides[key] = False
        elif raw:
            logger.debug("Ignoring %s=%r (expected 'true' or 'false')", key.upper(), raw)
    return overrides


def _read_file(path: Path) -> dict:
    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _file_overrides(data: dict, path: Path) -> dict[str, bool]:
    features = data.pop("features", None) or {}
    if not isinstance(features, dict):
        raise ConfigError(f"'features' in {path} must be a mapping of feature -> true/false")

    overrides: dict[str, bool] = {}
    for key, value in features.items():
        key = str(key).lower()
        if key not in FEATURE_KEYS:
            raise ConfigError(
                f"Unknown feature '{key}' in {path}. Valid: {', '.join(FEATURE_KEYS)}"
            )
        if not isinstance(value, bool):
            raise ConfigError(f"Feature '{key}' in {path} must be true or false, got {value!r}")
        overrides[key] = value
    return overrides


def load_config(
    project_root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    template: str | None = None,
    require_rails: bool = True,
) -> StarterConfig:
    """Resolve the configuration for one run.

    Args:
        project_root: Rails project root. If None, searches upward from cwd.
        config_path: Explicit config file. Defaults to <root>/.railstarter.yml.
        environ: Environment to read overrides from (default: os.environ).
        template: Template preset from the command line; beats the file.
        require_rails: Fail when the root does not look like a Rails app.

    Raises:
        ConfigError: If the project root or config file is missing or invalid.
    """
    if project_root is None:
        project_root = find_project_root()
        if project_root is None:
            raise ConfigError(
                "No Rails project found (looked for Gemfile and config/application.rb). "
                "Run from inside a Rails app, or pass --project."
            )
    project_root = project_root.resolve()

    if not project_root.is_dir():
        raise ConfigError(f"Project directory not found: {project_root}")
    if require_rails and not (project_root / "Gemfile").is_file():
        raise ConfigError(f"No Gemfile in {project_root}")

    data: dict = {}
    overrides: dict[str, bool] = {}
    path = config_path or project_root / CONFIG_FILE
    if config_path is not None and not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    if path.is_file():
        data = _read_file(path)
        overrides = _file_overrides(data, path)

    overrides.update(parse_overrides(environ))

    data["project_root"] = str(project_root)
    data["overrides"] = overrides
    if template is not None:
        data["template"] = template

    try:
        config = StarterConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        "Loaded config for %s (template=%s, %d override(s))",
        project_root, config.template, len(config.overrides),
    )
    return config
