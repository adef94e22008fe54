"""
Tests for configuration loading — project root discovery, .railstarter.yml and env overrides.
"""

import textwrap
from pathlib import Path

import pytest

from railstarter.core.config.loader import (
    ConfigError,
    find_project_root,
    load_config,
    parse_overrides,
)


def _write_config(root: Path, body: str) -> Path:
    path = root / ".railstarter.yml"
    path.write_text(textwrap.dedent(body))
    return path


# ── Project Root Tests ───────────────────────────────────────────────


class TestFindProjectRoot:
    def test_at_root(self, rails_app: Path):
        assert find_project_root(rails_app) == rails_app.resolve()

    def test_from_subdirectory(self, rails_app: Path):
        nested = rails_app / "app" / "models" / "concerns"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == rails_app.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_project_root(tmp_path) is None

    def test_gemfile_alone_is_not_enough(self, tmp_path: Path):
        (tmp_path / "Gemfile").write_text('source "https://rubygems.org"\n')
        assert find_project_root(tmp_path) is None


# ── Override Tests ───────────────────────────────────────────────────


class TestParseOverrides:
    def test_true_and_false(self):
        overrides = parse_overrides({"DEVISE": "true", "PAGINATION": "false"})
        assert overrides == {"devise": True, "pagination": False}

    def test_other_values_ignored(self):
        overrides = parse_overrides({"DEVISE": "1", "NAVBAR": "yes", "SECURITY": "", "ADMIN": "TRUE"})
        assert overrides == {}

    def test_unrelated_variables_ignored(self):
        assert parse_overrides({"HOME": "/root", "PATH": "/usr/bin"}) == {}


# ── Loader Tests ─────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_file(self, rails_app: Path):
        config = load_config(rails_app, environ={})
        assert config.project_root == str(rails_app.resolve())
        assert config.template == "custom"
        assert config.overrides == {}
        assert config.audit is True
        assert config.friendly_urls.slug_from == "email"

    def test_file_settings(self, rails_app: Path):
        _write_config(rails_app, """\
            template: bootstrap
            audit: false
            features:
              pagination: true
              ruby_llm: false
            friendly_urls:
              model: Article
              slug_from: title
        """)

        config = load_config(rails_app, environ={})

        assert config.template == "bootstrap"
        assert config.audit is False
        assert config.overrides == {"pagination": True, "ruby_llm": False}
        assert config.friendly_urls.model == "Article"
        assert config.friendly_urls.slug_from == "title"

    def test_environment_wins(self, rails_app: Path):
        _write_config(rails_app, """\
            features:
              pagination: true
        """)
        config = load_config(rails_app, environ={"PAGINATION": "false", "SECURITY": "true"})
        assert config.overrides == {"pagination": False, "security": True}

    def test_template_argument_beats_file(self, rails_app: Path):
        _write_config(rails_app, "template: bootstrap\n")
        config = load_config(rails_app, environ={}, template="tailwind")
        assert config.template == "tailwind"

    def test_explicit_config_path(self, rails_app: Path, tmp_path: Path):
        other = tmp_path / "starter.yml"
        other.write_text("features:\n  security: true\n")
        config = load_config(rails_app, config_path=other, environ={})
        assert config.overrides == {"security": True}

    def test_empty_file(self, rails_app: Path):
        _write_config(rails_app, "")
        assert load_config(rails_app, environ={}).overrides == {}


class TestLoadConfigErrors:
    def test_no_project(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match="No Rails project found"):
            load_config(environ={})

    def test_missing_gemfile(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="No Gemfile"):
            load_config(tmp_path, environ={})

    def test_missing_gemfile_allowed(self, tmp_path: Path):
        config = load_config(tmp_path, environ={}, require_rails=False)
        assert config.project_root == str(tmp_path.resolve())

    def test_missing_explicit_file(self, rails_app: Path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(rails_app, config_path=rails_app / "nope.yml", environ={})

    def test_invalid_yaml(self, rails_app: Path):
        _write_config(rails_app, "features: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(rails_app, environ={})

    def test_not_a_mapping(self, rails_app: Path):
        _write_config(rails_app, "- pagination\n- security\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(rails_app, environ={})

    def test_unknown_feature(self, rails_app: Path):
        _write_config(rails_app, "features:\n  kubernetes: true\n")
        with pytest.raises(ConfigError, match="Unknown feature 'kubernetes'"):
            load_config(rails_app, environ={})

    def test_non_bool_feature(self, rails_app: Path):
        _write_config(rails_app, "features:\n  devise: maybe\n")
        with pytest.raises(ConfigError, match="must be true or false"):
            load_config(rails_app, environ={})

    def test_features_not_a_mapping(self, rails_app: Path):
        _write_config(rails_app, "features:\n  - devise\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(rails_app, environ={})

    def test_invalid_template(self, rails_app: Path):
        _write_config(rails_app, "template: bulma\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(rails_app, environ={})
