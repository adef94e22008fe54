"""Development tooling: Annotate, Better Errors, Pry, Awesome Print and RuboCop."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement, gems
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_GROUP, DEV_TEST_GROUP

RUBOCOP_URL = "https://raw.githubusercontent.com/lewagon/rails-templates/master/.rubocop.yml"
ANNOTATE_TASKS = ("lib/tasks/auto_annotate_models.rake", "config/initializers/annotate.rb")
DEVELOPMENT_RB = "config/environments/development.rb"

BETTER_ERRORS_NOTE = """\

# Better Errors is enabled in development only.
# Configure allowed IPs if you use Docker / VMs:
# if defined?(BetterErrors)
#   BetterErrors::Middleware.allow_ip! '0.0.0.0/0'
# end

"""

PRYRC = """\
# Pry aliases for easier debugging.
alias s step
alias n next
alias c continue
alias ls ls -M
alias wt whereis
"""

AWESOME_PRINT_HOOK = """\

# Auto-load Awesome Print
AwesomePrint.irb!
"""


class DevToolsInstaller(FeatureInstaller):
    key = "dev_tools"
    title = "Dev tools"
    commit_message = (
        "feat: install dev_tools template gems "
        "(annotate, better errors, pry, awesome print, rubocop)."
    )
    trigger = "better_errors"
    marker = MarkerRule(files_all_of=[".rubocop.yml"], files_any_of=list(ANNOTATE_TASKS))
    dependencies = (
        Placement(
            deps=gems("annotate", "better_errors", "binding_of_caller", "pry-byebug")
            + gems("pry-rails", "awesome_print", require=False),
            after=DEV_GROUP,
        ),
        Placement(deps=gems("rubocop", "rubocop-rails", require=False), after=DEV_TEST_GROUP),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not any(t.exists(path) for path in ANNOTATE_TASKS):
            self.run_if_available(
                "bundle exec annotate --help > /dev/null 2>&1",
                "bundle exec annotate --install",
                "annotate",
            )

        if not t.exists(".rubocop.yml"):
            t.download(RUBOCOP_URL, ".rubocop.yml")

        if t.exists(DEVELOPMENT_RB) and not t.contains(DEVELOPMENT_RB, "BetterErrors"):
            t.environment(BETTER_ERRORS_NOTE, env="development")

        if t.probe("bundle exec pry --help > /dev/null 2>&1"):
            t.write_file(".pryrc", PRYRC)
        else:
            self.warn("Pry is not available yet, skipping .pryrc")

        awesome_print = "bundle exec ruby -e \"require 'awesome_print'; puts 'OK'\" > /dev/null 2>&1"
        if t.exists(".pryrc") and t.probe(awesome_print):
            t.append_file(".pryrc", AWESOME_PRINT_HOOK)
