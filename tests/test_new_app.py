"""
Tests for the new-app orchestration — baseline, selection, one bundle install, installers, checkpoints.
"""

import json
from pathlib import Path

from railstarter.core.models.action import Receipt
from railstarter.core.models.config import StarterConfig
from railstarter.core.use_cases.new_app import FINAL_COMMIT, run_new_app

ALL_OFF = {
    key: False for key in (
        "css", "auth", "admin", "dev_tools", "friendly_urls", "image_uploading_cloudinary",
        "navbar", "pagination", "ruby_llm", "security", "testing",
    )
}


def _creates(relative: str):
    def effect(ctx):
        target = Path(ctx.working_dir) / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("")
    return effect


def _ok() -> Receipt:
    return Receipt.success(adapter="shell", action_id="probe")


def commit_messages(git) -> list[str]:
    return [ctx.params["message"] for ctx in git.call_log if ctx.params.get("operation") == "commit"]


def _config(rails_app: Path, audit: bool = False, template: str = "custom", **overrides):
    """All features off unless overridden; an override of None removes the key."""
    merged = {**ALL_OFF, **overrides}
    return StarterConfig(
        project_root=str(rails_app),
        template=template,
        overrides={k: v for k, v in merged.items() if v is not None},
        audit=audit,
    )


class TestBaseline:
    def test_nothing_selected(self, rails_app, registry, shell, git, scripted):
        prompter = scripted()
        result = run_new_app(_config(rails_app), registry=registry, prompter=prompter)

        assert result.error is None
        assert result.results == []
        assert prompter.asked == []

        gemfile = (rails_app / "Gemfile").read_text()
        assert 'gem "dotenv-rails"' in gemfile
        layout = (rails_app / "app/views/layouts/application.html.erb").read_text()
        assert "shrink-to-fit=no" in layout
        assert '<%= render "shared/flashes" %>' in layout
        assert (rails_app / "app/views/shared/_flashes.html.erb").is_file()
        assert 'root to: "pages#home"' in (rails_app / "config/routes.rb").read_text()
        assert "generate.helper false" in (rails_app / "config/application.rb").read_text()
        assert (rails_app / ".env").is_file()

        assert shell.ran("db:drop db:create db:migrate") == 1
        assert shell.ran("bundle lock --add-platform x86_64-linux") == 1
        assert shell.ran("db:migrate db:seed") == 1
        assert commit_messages(git) == [
            "initial commit: new rails app setup with Custom template.",
            FINAL_COMMIT,
        ]
        assert result.checkpoints == ["initial commit", "final"]

    def test_clean_tree_records_no_checkpoint(self, rails_app, registry, git, scripted):
        git.set_command_response(
            "commit", Receipt.skip(adapter="git", action_id="commit", reason="nothing to commit"),
        )
        result = run_new_app(_config(rails_app), registry=registry, prompter=scripted())

        assert result.error is None
        assert "initial commit" not in result.checkpoints
        assert result.checkpoints == []
        assert git.ran("commit") == 2

    def test_tailwind_template_preset(self, rails_app, registry, scripted):
        result = run_new_app(_config(rails_app, template="tailwind"), registry=registry, prompter=scripted())

        assert result.selection.css == "tailwind"
        assert result.result_for("tailwind").installed
        flashes = (rails_app / "app/views/shared/_flashes.html.erb").read_text()
        assert "bg-blue-100" in flashes


class TestOrchestration:
    def test_devise_and_admin_without_pagination(self, rails_app, registry, shell, git, scripted):
        shell.add_side_effect("devise:install", _creates("config/initializers/devise.rb"))
        shell.add_side_effect("generate devise User", _creates("app/models/user.rb"))
        prompter = scripted()

        result = run_new_app(
            _config(rails_app, devise=True, admin=True, auth=None, pagination=False),
            registry=registry,
            prompter=prompter,
        )

        assert result.error is None
        assert prompter.asked == []
        gemfile = (rails_app / "Gemfile").read_text()
        assert 'gem "devise", "~> 4.9"' in gemfile
        assert "pagy" not in gemfile

        assert [r.feature for r in result.results] == ["devise", "admin"]
        assert result.result_for("devise").installed
        assert result.result_for("admin").installed
        assert result.result_for("pagination") is None

        messages = commit_messages(git)
        assert "feat: install devise." in messages
        assert "feat: install active admin." in messages
        assert messages[-1] == FINAL_COMMIT

    def test_dependencies_installed_once(self, rails_app, registry, shell, scripted):
        shell.set_command_failure("bundle check", "gems missing")
        result = run_new_app(
            _config(rails_app, pagination=True, security=True, ruby_llm=True),
            registry=registry,
            prompter=scripted(),
        )

        assert result.install_count == 1
        assert shell.ran("bundle install") == 1
        assert len(result.installed) == 3

    def test_embedded_installers_defer_migrations(self, rails_app, registry, shell, scripted):
        run_new_app(_config(rails_app, pagination=True), registry=registry, prompter=scripted())
        # only the final "db:migrate db:seed"
        assert shell.ran("bin/rails db:migrate") == 1

    def test_failed_bundle_install_stops_the_run(self, rails_app, registry, shell, git, scripted):
        shell.set_command_failure("bundle check", "gems missing")
        shell.set_command_failure("bundle install", "could not reach rubygems.org")

        result = run_new_app(_config(rails_app, pagination=True), registry=registry, prompter=scripted())

        assert "Dependency installation failed" in result.error
        assert result.results == []
        assert commit_messages(git) == []

    def test_aborted_feature_does_not_stop_the_rest(self, rails_app, registry, shell, git, scripted):
        # the probe must match first: responses are checked in insertion order
        shell.set_command_response("pagy:install --help", _ok())
        shell.set_command_failure("pagy:install", "boom")

        result = run_new_app(
            _config(rails_app, pagination=True, security=True),
            registry=registry,
            prompter=scripted(),
        )

        assert result.result_for("pagination").aborted
        assert result.result_for("security").installed
        messages = commit_messages(git)
        assert "feat: install pagy pagination." not in messages
        assert "feat: install security." in messages

    def test_audit_entries(self, rails_app, registry, scripted):
        run_new_app(
            _config(rails_app, audit=True, security=True),
            registry=registry,
            prompter=scripted(),
        )
        lines = (rails_app / "log/railstarter.ndjson").read_text().splitlines()
        entries = [json.loads(line) for line in lines]
        assert [(e["feature"], e["status"], e["mode"]) for e in entries] == [
            ("security", "installed", "embedded"),
        ]


class TestDryRun:
    def test_dry_run_changes_nothing(self, rails_app, registry, shell, git, scripted):
        before = {p: p.read_text() for p in rails_app.rglob("*") if p.is_file()}

        result = run_new_app(
            _config(rails_app, pagination=True),
            registry=registry,
            prompter=scripted(),
            dry_run=True,
        )

        assert result.error is None
        after = {p: p.read_text() for p in rails_app.rglob("*") if p.is_file()}
        assert after == before
        assert shell.call_count == 0
        assert git.call_count == 0
        # the pending declaration still makes pagination run (as a dry run)
        assert result.result_for("pagination") is not None

