"""Tailwind CSS via tailwindcss-rails, with a Tailwind wrapper for Simple Form."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency
from railstarter.core.services.markers import TAILWIND_CONFIGS

SIMPLE_FORM_INITIALIZER = "config/initializers/simple_form.rb"

SIMPLE_FORM_TAILWIND = """\
# Use this setup block to configure all options available in SimpleForm.
SimpleForm.setup do |config|
  # Tailwind CSS configuration
  config.wrappers :tailwind, class: 'mb-4' do |b|
    b.use :html5
    b.use :placeholder
    b.optional :maxlength
    b.optional :minlength
    b.optional :pattern
    b.optional :min_max
    b.optional :readonly
    b.use :label, class: 'block text-sm font-medium text-gray-700 mb-1'
    b.use :input, class: 'mt-1 block w-full rounded-md border-gray-300 shadow-sm focus:border-indigo-300 focus:ring focus:ring-indigo-200 focus:ring-opacity-50', error_class: 'border-red-500'
    b.use :error, wrap_with: { tag: 'p', class: 'mt-2 text-sm text-red-600' }
    b.use :hint, wrap_with: { tag: 'p', class: 'mt-2 text-sm text-gray-500' }
  end

  config.default_wrapper = :tailwind
end
"""


class TailwindInstaller(FeatureInstaller):
    key = "tailwind"
    title = "Tailwind CSS"
    commit_message = "feat: install tailwind."
    trigger = "tailwindcss-rails"
    # v3 keeps its config in config/, v4 in app/assets/tailwind/
    marker = MarkerRule(files_any_of=list(TAILWIND_CONFIGS), files_all_of=[SIMPLE_FORM_INITIALIZER])
    dependencies = (
        Placement(
            deps=(
                Dependency(name="tailwindcss-rails"),
                Dependency(name="simple_form", options={"github": "heartcombo/simple_form"}),
            ),
            before=DEV_TEST_GROUP,
        ),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not any(t.exists(path) for path in TAILWIND_CONFIGS):
            self.run_if_available(
                "bundle exec rails tailwindcss:install --help > /dev/null 2>&1",
                "bin/rails tailwindcss:install",
                "Tailwind installer",
            )

        if not t.exists(SIMPLE_FORM_INITIALIZER):
            self.run_if_available(
                "bundle exec rails generate simple_form:install --help > /dev/null 2>&1",
                "bin/rails generate simple_form:install",
                "Simple Form generator",
            )

        t.write_file("config/initializers/simple_form_tailwind.rb", SIMPLE_FORM_TAILWIND)
