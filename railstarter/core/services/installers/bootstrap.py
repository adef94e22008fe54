"""Bootstrap 5 with Le Wagon's stylesheets, Sprockets and Simple Form."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency
from railstarter.core.services.markers import BOOTSTRAP_STYLESHEETS

STYLESHEETS_URL = "https://github.com/lewagon/rails-stylesheets/archive/rails-8.zip"
UNPACKED_DIR = "app/assets/rails-stylesheets-rails-8"
LAYOUT = "app/views/layouts/application.html.erb"
SIMPLE_FORM_BOOTSTRAP = "config/initializers/simple_form_bootstrap.rb"
SPROCKETS_MANIFEST = "app/assets/config/manifest.js"

MANIFEST_JS = """\
//= link_tree ../images
//= link_directory ../stylesheets .css
"""

MANIFEST_JS_LINKS = """\
//= link popper.js
//= link bootstrap.min.js
"""

ASSETS_PRECOMPILE = """\
Rails.application.config.assets.precompile += %w(bootstrap.min.js popper.js)
"""

JS_IMPORTS = """\
import "@popperjs/core"
import "bootstrap"
"""


class BootstrapInstaller(FeatureInstaller):
    key = "bootstrap"
    title = "Bootstrap"
    commit_message = "feat: install bootstrap."
    trigger = "bootstrap"
    marker = MarkerRule(
        globs_all_of=[BOOTSTRAP_STYLESHEETS],
        files_all_of=[SIMPLE_FORM_BOOTSTRAP],
    )
    dependencies = (
        Placement(
            deps=(
                Dependency(name="sprockets-rails"),
                Dependency(name="bootstrap", constraint="~> 5.3"),
                Dependency(name="autoprefixer-rails"),
                Dependency(name="font-awesome-sass", constraint="~> 6.1"),
                Dependency(name="simple_form", options={"github": "heartcombo/simple_form"}),
                Dependency(name="sassc-rails"),
            ),
            before=DEV_TEST_GROUP,
        ),
    )

    @classmethod
    def declare_dependencies(cls, ledger, constraints=None):
        added = super().declare_dependencies(ledger, constraints)
        # Sprockets replaces Propshaft
        ledger.drop("propshaft")
        return added

    def write_artifacts(self) -> None:
        t = self.toolkit

        # the stock stylesheets are replaced wholesale, so only once
        if not t.glob(BOOTSTRAP_STYLESHEETS):
            t.remove("app/assets/stylesheets")
            t.remove("vendor")
            t.run(f"curl -L {STYLESHEETS_URL} > stylesheets.zip")
            t.run(
                "unzip stylesheets.zip -d app/assets && rm -f stylesheets.zip"
                f" && rm -f {UNPACKED_DIR}/README.md"
            )
            t.run(f"mv {UNPACKED_DIR} app/assets/stylesheets")

        t.write_file(SPROCKETS_MANIFEST, MANIFEST_JS)
        t.gsub_file(LAYOUT, "stylesheet_link_tag :app", 'stylesheet_link_tag "application"')

        if not t.exists(SIMPLE_FORM_BOOTSTRAP):
            self.run_if_available(
                "bundle exec rails generate simple_form:install --help > /dev/null 2>&1",
                "bin/rails generate simple_form:install --bootstrap",
                "Simple Form Bootstrap generator",
            )

        t.append_file("config/initializers/assets.rb", ASSETS_PRECOMPILE)
        t.append_file("app/javascript/application.js", JS_IMPORTS)
        t.append_file(SPROCKETS_MANIFEST, MANIFEST_JS_LINKS)
