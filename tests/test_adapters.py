"""
Tests for adapter protocol, registry, mock, shell and filesystem adapters.
"""

from pathlib import Path

import pytest

from railstarter.adapters.base import ExecutionContext
from railstarter.adapters.mock import MockAdapter
from railstarter.adapters.registry import AdapterRegistry
from railstarter.adapters.shell.command import ShellCommandAdapter
from railstarter.adapters.shell.filesystem import FilesystemAdapter
from railstarter.core.models.action import Action, Receipt

# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_working_dir_with_subdir(self):
        ctx = ExecutionContext(
            action=Action(id="test", adapter="shell"),
            project_root="/project",
            subdir="app/models",
        )
        assert ctx.working_dir == "/project/app/models"

    def test_working_dir_without_subdir(self):
        ctx = ExecutionContext(
            action=Action(id="test", adapter="shell"),
            project_root="/project",
        )
        assert ctx.working_dir == "/project"


# ── Mock Adapter Tests ───────────────────────────────────────────────


def _shell_ctx(command: str, action_id: str = "op-1") -> ExecutionContext:
    return ExecutionContext(
        action=Action(id=action_id, adapter="shell", params={"command": command}),
        params={"command": command},
    )


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="shell")
        receipt = mock.execute(_shell_ctx("bin/rails db:migrate"))
        assert receipt.ok
        assert mock.call_count == 1
        assert mock.commands == ["bin/rails db:migrate"]

    def test_set_failure_by_id(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure")
        receipt = mock.execute(_shell_ctx("anything", action_id="op-fail"))
        assert receipt.failed
        assert receipt.error == "Intentional failure"

    def test_command_failure_by_fragment(self):
        mock = MockAdapter("shell")
        mock.set_command_failure("bundle install", "network down")
        assert mock.execute(_shell_ctx("bundle install --jobs 4")).failed
        assert mock.execute(_shell_ctx("bundle check")).ok

    def test_ran_counts_fragments(self):
        mock = MockAdapter("shell")
        for cmd in ("bin/rails db:migrate", "bin/rails db:migrate db:seed", "bundle check"):
            mock.execute(_shell_ctx(cmd))
        assert mock.ran("db:migrate") == 2
        assert mock.ran("bundle") == 1

    def test_side_effect_runs_only_on_success(self):
        mock = MockAdapter("shell")
        hits: list[str] = []
        mock.add_side_effect("generate", lambda ctx: hits.append(ctx.params["command"]))
        mock.set_command_failure("generate broken", "no such generator")

        mock.execute(_shell_ctx("bin/rails generate devise:install"))
        mock.execute(_shell_ctx("bin/rails generate broken"))

        assert hits == ["bin/rails generate devise:install"]

    def test_stored_receipt_is_copied(self):
        mock = MockAdapter()
        mock.set_response("op-1", Receipt.success(adapter="mock", action_id="op-1", output="x"))
        first = mock.execute(_shell_ctx("a"))
        first.output = "changed"
        assert mock.execute(_shell_ctx("a")).output == "x"

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("op-1")
        mock.execute(_shell_ctx("a"))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(_shell_ctx("a")).ok


# ── Registry Tests ───────────────────────────────────────────────────


class TestRegistry:
    def test_unknown_adapter(self):
        registry = AdapterRegistry()
        receipt = registry.execute_action(Action(id="op-1", adapter="nope"))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_mock_mode_succeeds_without_adapters(self):
        registry = AdapterRegistry(mock_mode=True)
        receipt = registry.execute_action(Action(id="op-1", adapter="shell"))
        assert receipt.ok
        assert receipt.metadata["mock"] is True

    def test_dry_run_validates_then_skips(self, tmp_path: Path):
        registry = AdapterRegistry()
        mock = MockAdapter("shell")
        registry.register(mock)

        receipt = registry.execute_action(
            Action(id="op-1", adapter="shell", params={"command": "rm -rf /"}),
            project_root=str(tmp_path),
            dry_run=True,
        )

        assert receipt.status == "skipped"
        assert mock.call_count == 0

    def test_validation_failure(self, tmp_path: Path):
        registry = AdapterRegistry()
        registry.register(FilesystemAdapter())
        receipt = registry.execute_action(
            Action(id="op-1", adapter="filesystem", params={"operation": "explode", "path": "x"}),
            project_root=str(tmp_path),
        )
        assert receipt.failed
        assert "Validation failed" in receipt.error

    def test_adapter_status(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter("shell", available=False))
        status = registry.adapter_status()
        assert status["shell"]["available"] is False
        assert registry.list_adapters() == ["shell"]


# ── Shell Adapter Tests ──────────────────────────────────────────────


class TestShellCommandAdapter:
    def test_success(self, tmp_path: Path):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(
            Action(id="op-1", adapter="shell", params={"command": "echo hello"}),
            project_root=str(tmp_path),
        )
        assert receipt.ok
        assert receipt.output == "hello"

    def test_failure_keeps_stderr(self, tmp_path: Path):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(
            Action(id="op-1", adapter="shell", params={"command": "echo oops >&2; exit 3"}),
            project_root=str(tmp_path),
        )
        assert receipt.failed
        assert receipt.error == "oops"
        assert receipt.metadata["return_code"] == 3

    def test_missing_cwd_fails_validation(self, tmp_path: Path):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(
            Action(id="op-1", adapter="shell", params={"command": "true"}),
            project_root=str(tmp_path / "missing"),
        )
        assert receipt.failed


# ── Filesystem Adapter Tests ─────────────────────────────────────────


@pytest.fixture
def fs(tmp_path: Path):
    registry = AdapterRegistry()
    registry.register(FilesystemAdapter())

    def run(operation: str, path: str, **params):
        return registry.execute_action(
            Action(
                id=f"fs-{operation}",
                adapter="filesystem",
                params={"operation": operation, "path": path, **params},
            ),
            project_root=str(tmp_path),
        )
    return run


class TestFilesystemAdapter:
    def test_write_creates_parents(self, fs, tmp_path: Path):
        receipt = fs("write", "config/initializers/pagy.rb", content="# pagy\n")
        assert receipt.changed
        assert (tmp_path / "config/initializers/pagy.rb").read_text() == "# pagy\n"

    def test_write_does_not_overwrite_by_default(self, fs, tmp_path: Path):
        fs("write", "a.rb", content="one\n")
        receipt = fs("write", "a.rb", content="two\n")
        assert receipt.status == "skipped"
        assert not receipt.changed
        assert (tmp_path / "a.rb").read_text() == "one\n"

    def test_write_overwrite(self, fs, tmp_path: Path):
        fs("write", "a.rb", content="one\n")
        assert fs("write", "a.rb", content="two\n", overwrite=True).changed
        assert (tmp_path / "a.rb").read_text() == "two\n"

    def test_append_is_idempotent(self, fs, tmp_path: Path):
        fs("append", ".gitignore", content=".env*\n")
        assert not fs("append", ".gitignore", content=".env*\n").changed
        assert (tmp_path / ".gitignore").read_text() == ".env*\n"

    def test_append_adds_missing_newline(self, fs, tmp_path: Path):
        (tmp_path / ".env").write_text("A=1")
        fs("append", ".env", content="B=2\n")
        assert (tmp_path / ".env").read_text() == "A=1\nB=2\n"

    def test_inject_after(self, fs, tmp_path: Path):
        (tmp_path / "routes.rb").write_text("draw do\nend\n")
        assert fs("inject", "routes.rb", content="  root\n", after="draw do\n").changed
        assert (tmp_path / "routes.rb").read_text() == "draw do\n  root\nend\n"
        assert not fs("inject", "routes.rb", content="  root\n", after="draw do\n").changed

    def test_inject_before(self, fs, tmp_path: Path):
        (tmp_path / "a.rb").write_text("x\nend\n")
        fs("inject", "a.rb", content="y\n", before="end\n")
        assert (tmp_path / "a.rb").read_text() == "x\ny\nend\n"

    def test_inject_missing_anchor(self, fs, tmp_path: Path):
        (tmp_path / "a.rb").write_text("x\n")
        receipt = fs("inject", "a.rb", content="y\n", after="nope\n")
        assert receipt.status == "skipped"
        assert receipt.metadata["anchor_missing"] is True

    def test_inject_missing_file_fails(self, fs):
        assert fs("inject", "a.rb", content="y\n", after="x").failed

    def test_gsub_literal_and_regex(self, fs, tmp_path: Path):
        (tmp_path / "a.rb").write_text("service = :local\n# enabled\n")
        assert fs("gsub", "a.rb", pattern=":local", replacement=":cloudinary").changed
        assert fs("gsub", "a.rb", pattern=r"^# (enabled)$", replacement=r"\1", regex=True).changed
        assert (tmp_path / "a.rb").read_text() == "service = :cloudinary\nenabled\n"
        assert not fs("gsub", "a.rb", pattern=":local", replacement=":cloudinary").changed

    def test_remove_dir_and_missing(self, fs, tmp_path: Path):
        (tmp_path / "vendor/x").mkdir(parents=True)
        assert fs("remove", "vendor").changed
        assert not (tmp_path / "vendor").exists()
        assert fs("remove", "vendor").status == "skipped"

    def test_touch_and_mkdir(self, fs, tmp_path: Path):
        assert fs("touch", "tmp/railstarter/navbar.requested").changed
        assert not fs("touch", "tmp/railstarter/navbar.requested").changed
        assert fs("mkdir", "app/views/shared").changed
        assert (tmp_path / "app/views/shared").is_dir()
