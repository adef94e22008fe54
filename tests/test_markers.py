"""
Tests for the idempotency guard — marker rules and CSS detection.
"""

from pathlib import Path

from railstarter.core.models.feature import MarkerRule
from railstarter.core.services.markers import detect_css_framework, is_installed


def _touch(root: Path, relative: str, content: str = "") -> None:
    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)


class TestIsInstalled:
    def test_empty_rule_never_matches(self, rails_app: Path):
        assert not is_installed(MarkerRule(), rails_app)

    def test_files_all_of(self, rails_app: Path):
        rule = MarkerRule(files_all_of=["config/initializers/devise.rb", "app/models/user.rb"])
        _touch(rails_app, "config/initializers/devise.rb")
        assert not is_installed(rule, rails_app)

        _touch(rails_app, "app/models/user.rb")
        assert is_installed(rule, rails_app)

    def test_files_any_of(self, rails_app: Path):
        rule = MarkerRule(files_any_of=["a.rb", "b.rb"])
        assert not is_installed(rule, rails_app)
        _touch(rails_app, "b.rb")
        assert is_installed(rule, rails_app)

    def test_globs(self, rails_app: Path):
        rule = MarkerRule(globs_all_of=["db/migrate/*_create_friendly_id_slugs.rb"])
        assert not is_installed(rule, rails_app)
        _touch(rails_app, "db/migrate/20250101000000_create_friendly_id_slugs.rb")
        assert is_installed(rule, rails_app)

    def test_manifest_and_files_must_both_hold(self, rails_app: Path):
        rule = MarkerRule(manifest_all_of=["pagy"], files_all_of=["config/initializers/pagy.rb"])
        _touch(rails_app, "config/initializers/pagy.rb")
        assert not is_installed(rule, rails_app)

        gemfile = rails_app / "Gemfile"
        gemfile.write_text(gemfile.read_text() + 'gem "pagy"\n')
        assert is_installed(rule, rails_app)

    def test_content_contains(self, rails_app: Path):
        layout = "app/views/layouts/application.html.erb"
        rule = MarkerRule(content_contains={layout: 'render "shared/navbar"'})
        assert not is_installed(rule, rails_app)

        target = rails_app / layout
        target.write_text(target.read_text().replace("<body>\n", '<body>\n<%= render "shared/navbar" %>\n'))
        assert is_installed(rule, rails_app)

    def test_content_contains_missing_file(self, rails_app: Path):
        rule = MarkerRule(content_contains={"nope.rb": "x"})
        assert not is_installed(rule, rails_app)


class TestDetectCssFramework:
    def test_none(self, rails_app: Path):
        assert detect_css_framework(rails_app) is None

    def test_bootstrap(self, rails_app: Path):
        _touch(rails_app, "app/assets/stylesheets/config/_bootstrap_variables.scss")
        _touch(rails_app, "app/assets/stylesheets/_bootstrap_overrides.scss")
        assert detect_css_framework(rails_app) == "bootstrap"

    def test_tailwind(self, rails_app: Path):
        _touch(rails_app, "app/assets/tailwind/application.css")
        assert detect_css_framework(rails_app) == "tailwind"
