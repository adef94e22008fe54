"""
Baseline — what every generated app gets, whatever was selected.

``pre_install`` runs before the selection questions (it only touches
files and the Gemfile); ``post_install`` runs after the one batch
``bundle install``, when generators are loadable, and ends with the
initial git checkpoint.
"""

from __future__ import annotations

import logging

from railstarter.core.engine.toolkit import CommandFailed, Toolkit
from railstarter.core.models.config import StarterConfig
from railstarter.core.models.manifest import DEV_TEST_GROUP
from railstarter.core.services.installers import INSTALLERS
from railstarter.core.services.installers.dev_tools import RUBOCOP_URL
from railstarter.core.services.ledger import DependencyLedger

logger = logging.getLogger(__name__)

LAYOUT = "app/views/layouts/application.html.erb"
FLASHES = "app/views/shared/_flashes.html.erb"
PAGES_CONTROLLER = "app/controllers/pages_controller.rb"

KILL_SPRING = "if uname | grep -q 'Darwin'; then pgrep spring | xargs kill -9; fi"

VIEWPORT_PATTERN = r'<meta name="viewport" content="width=device-width,\s*initial-scale=1">'
VIEWPORT = '<meta name="viewport" content="width=device-width, initial-scale=1, shrink-to-fit=no">'

NEUTRAL_FLASHES = """\
<% if notice %>
  <div class="alert alert-info p-4 rounded mb-4">
    <%= notice %>
  </div>
<% end %>
<% if alert %>
  <div class="alert alert-warning p-4 rounded mb-4">
    <%= alert %>
  </div>
<% end %>
"""

_CLOSE_ICON = (
    '<svg class="fill-current h-6 w-6 text-{color}-500" role="button" '
    'xmlns="http://www.w3.org/2000/svg" viewBox="0 0 20 20"><title>Close</title>'
    '<path d="M14.348 14.849a1.2 1.2 0 0 1-1.697 0L10 11.819l-2.651 3.029a1.2 1.2 0 1 1'
    '-1.697-1.697l2.758-3.15-2.759-3.152a1.2 1.2 0 1 1 1.697-1.697L10 8.183l2.651-3.031'
    'a1.2 1.2 0 1 1 1.697 1.697l-2.758 3.152 2.758 3.15a1.2 1.2 0 0 1 0 1.698z"/></svg>'
)

_TAILWIND_FLASH = """\
<% if {name} %>
  <div class="bg-{color}-100 border border-{color}-400 text-{color}-700 px-4 py-3 rounded relative mb-4" role="alert">
    <span class="block sm:inline"><%= {name} %></span>
    <span class="absolute top-0 bottom-0 right-0 px-4 py-3">
      {icon}
    </span>
  </div>
<% end %>
"""

TAILWIND_FLASHES = "".join(
    _TAILWIND_FLASH.format(name=name, color=color, icon=_CLOSE_ICON.format(color=color))
    for name, color in (("notice", "blue"), ("alert", "yellow"))
)

README = """\
Rails app generated with railstarter.
"""

GENERATORS = """\
config.generators do |generate|
  generate.assets false
  generate.helper false
  generate.test_framework :test_unit, fixture: false
end
"""

PAGES_CONTROLLER_BODY = """\
class PagesController < ApplicationController
  def home
  end
end
"""

GITIGNORE = """\
# Ignore .env file containing credentials.
.env*
*.swp
.DS_Store
"""


def kill_spring(toolkit: Toolkit) -> None:
    """Stop a stale Spring server on macOS. Never fatal."""
    receipt = toolkit.run(KILL_SPRING, check=False)
    if receipt.failed:
        logger.debug("Spring cleanup failed (ignored): %s", receipt.error)


def pre_install(toolkit: Toolkit, ledger: DependencyLedger, config: StarterConfig) -> None:
    """Gemfile and layout setup that needs no installed gems."""
    t = toolkit

    ledger.declare("dotenv-rails", after=DEV_TEST_GROUP)

    t.gsub_file(LAYOUT, VIEWPORT_PATTERN, VIEWPORT, regex=True)
    t.write_file(FLASHES, TAILWIND_FLASHES if config.template == "tailwind" else NEUTRAL_FLASHES)
    t.inject_into_file(LAYOUT, '<%= render "shared/flashes" %>\n', after="<body>\n")

    t.write_file("README.md", README, overwrite=True)
    t.environment(GENERATORS)

    if config.template in ("bootstrap", "tailwind"):
        INSTALLERS[config.template].declare_dependencies(ledger)
        logger.info("Template preset: %s", config.template)


def post_install(toolkit: Toolkit, ledger: DependencyLedger, config: StarterConfig) -> bool:
    """Database, home page, project hygiene and the initial commit.

    Returns whether the initial commit was made.
    """
    t = toolkit

    t.rails("db:drop db:create db:migrate")

    styled = ledger.is_declared("bootstrap") or ledger.is_declared("tailwindcss-rails")
    if ledger.is_declared("simple_form") and not styled:
        t.generate("simple_form:install")

    if not t.exists(PAGES_CONTROLLER):
        t.generate("controller", "pages", "home", "--skip-routes", "--no-test-framework")
    t.write_file(PAGES_CONTROLLER, PAGES_CONTROLLER_BODY, overwrite=True)

    if not t.contains("config/routes.rb", "root to:"):
        t.route('root to: "pages#home"')

    t.append_file(".gitignore", GITIGNORE)

    mailer = config.mailer
    for env, host in (("development", mailer.development_host), ("production", mailer.production_host)):
        t.environment(f'config.action_mailer.default_url_options = {{ host: "{host}" }}', env=env)

    # Heroku builds on Linux
    t.run("bundle lock --add-platform x86_64-linux")
    t.touch(".env")

    if not t.exists(".rubocop.yml"):
        try:
            t.download(RUBOCOP_URL, ".rubocop.yml")
        except CommandFailed as e:
            logger.warning("Could not fetch .rubocop.yml: %s", e)

    t.git_init()
    return t.checkpoint(f"initial commit: new rails app setup with {config.template.capitalize()} template.")
