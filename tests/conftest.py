"""
Shared test fixtures and configuration.

``rails_app`` is a skeleton of what ``rails new`` leaves behind: just
the files the installers read or edit. Shell and git are mocked; file
edits go through the real filesystem adapter, so tests assert on the
resulting tree.
"""

import textwrap
from collections.abc import Sequence
from pathlib import Path

import pytest

from railstarter.adapters.mock import MockAdapter
from railstarter.adapters.registry import AdapterRegistry
from railstarter.adapters.shell.filesystem import FilesystemAdapter
from railstarter.core.engine.toolkit import Toolkit
from railstarter.core.models.config import StarterConfig
from railstarter.core.services.ledger import DependencyLedger

GEMFILE = textwrap.dedent("""\
    source "https://rubygems.org"

    gem "rails", "~> 8.0.2"
    gem "propshaft"
    gem "sqlite3", ">= 2.1"
    gem "puma", ">= 5.0"

    group :development, :test do
      gem "debug", platforms: %i[ mri windows ], require: "debug/prelude"
    end

    group :development do
      gem "web-console"
    end
""")

LAYOUT = textwrap.dedent("""\
    <!DOCTYPE html>
    <html>
      <head>
        <title>App</title>
        <meta name="viewport" content="width=device-width,initial-scale=1">
        <%= stylesheet_link_tag :app, "data-turbo-track": "reload" %>
      </head>

    <body>
    <%= yield %>
    </body>
    </html>
""")

APP_FILES = {
    "Gemfile": GEMFILE,
    "app/views/layouts/application.html.erb": LAYOUT,
    "config/application.rb": textwrap.dedent("""\
        require_relative "boot"

        module App
          class Application < Rails::Application
            config.load_defaults 8.0
          end
        end
    """),
    "config/environments/development.rb": textwrap.dedent("""\
        Rails.application.configure do
          config.active_storage.service = :local
        end
    """),
    "config/environments/production.rb": textwrap.dedent("""\
        Rails.application.configure do
          config.active_storage.service = :local
        end
    """),
    "config/routes.rb": textwrap.dedent("""\
        Rails.application.routes.draw do
          get "up" => "rails/health#show", as: :rails_health_check
        end
    """),
    "config/storage.yml": textwrap.dedent("""\
        local:
          service: Disk
          root: <%= Rails.root.join("storage") %>
    """),
    "app/controllers/application_controller.rb": textwrap.dedent("""\
        class ApplicationController < ActionController::Base
        end
    """),
    "app/controllers/pages_controller.rb": textwrap.dedent("""\
        class PagesController < ApplicationController
          def home
          end
        end
    """),
    "app/helpers/application_helper.rb": "module ApplicationHelper\nend\n",
    "app/models/application_record.rb": textwrap.dedent("""\
        class ApplicationRecord < ActiveRecord::Base
          primary_abstract_class
        end
    """),
    ".gitignore": "/log/*\n/tmp/*\n",
}


def write_tree(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


class ScriptedPrompter:
    """Answers prompts from a fixed script, recording every question."""

    def __init__(self, confirms: Sequence[bool] = (), choices: Sequence[str] = ()):
        self._confirms = list(confirms)
        self._choices = list(choices)
        self.asked: list[str] = []

    def confirm(self, text: str) -> bool:
        self.asked.append(text)
        return self._confirms.pop(0) if self._confirms else False

    def choose(self, text: str, tokens: Sequence[str]) -> str:
        self.asked.append(text)
        answer = self._choices.pop(0) if self._choices else tokens[-1]
        assert answer in tokens, f"{answer!r} not offered for {text!r}"
        return answer


@pytest.fixture
def rails_app(tmp_path: Path) -> Path:
    """A freshly generated Rails 8 app skeleton."""
    root = tmp_path / "app"
    root.mkdir()
    write_tree(root, APP_FILES)
    return root


@pytest.fixture
def shell() -> MockAdapter:
    return MockAdapter("shell")


@pytest.fixture
def git() -> MockAdapter:
    return MockAdapter("git")


@pytest.fixture
def registry(shell: MockAdapter, git: MockAdapter) -> AdapterRegistry:
    """Mocked shell and git, real filesystem."""
    reg = AdapterRegistry()
    reg.register(shell)
    reg.register(FilesystemAdapter())
    reg.register(git)
    return reg


@pytest.fixture
def toolkit(registry: AdapterRegistry, rails_app: Path) -> Toolkit:
    return Toolkit(registry, rails_app, operation_id="op-test")


@pytest.fixture
def ledger(toolkit: Toolkit) -> DependencyLedger:
    return DependencyLedger(toolkit)


@pytest.fixture
def config(rails_app: Path) -> StarterConfig:
    return StarterConfig(project_root=str(rails_app), audit=False)


@pytest.fixture
def gemfile_text() -> str:
    """The Gemfile ``rails new`` writes."""
    return GEMFILE


@pytest.fixture
def scripted() -> type[ScriptedPrompter]:
    """Factory for prompters with canned answers: ``scripted(confirms=[...], choices=[...])``."""
    return ScriptedPrompter
