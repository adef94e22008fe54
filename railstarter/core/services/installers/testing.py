"""RSpec with FactoryBot, Faker and Shoulda Matchers."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement, gems
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP

RAILS_HELPER = "spec/rails_helper.rb"
FACTORY_BOT_SUPPORT = "spec/support/factory_bot.rb"

FACTORY_BOT_CONFIG = """\
RSpec.configure do |config|
  config.include FactoryBot::Syntax::Methods
end
"""

SHOULDA_CONFIG = """\

Shoulda::Matchers.configure do |config|
  config.integrate do |with|
    with.test_framework :rspec
    with.library :rails
  end
end
"""

# rspec-rails ships the support-file loader commented out
SUPPORT_GLOB = r"^# (Rails\.root\.glob\('spec/support/.*|Dir\[Rails\.root\.join\('spec', 'support'.*)$"

TEST_UNIT_GENERATOR = "generate.test_framework :test_unit, fixture: false"
RSPEC_GENERATOR = "generate.test_framework :rspec, fixture: false"


class RspecInstaller(FeatureInstaller):
    key = "testing"
    title = "RSpec testing"
    commit_message = "feat: install testing."
    trigger = "rspec-rails"
    marker = MarkerRule(
        manifest_all_of=["rspec-rails"],
        files_all_of=[RAILS_HELPER, FACTORY_BOT_SUPPORT],
    )
    dependencies = (
        Placement(
            deps=gems("rspec-rails", "factory_bot_rails", "faker", "shoulda-matchers"),
            after=DEV_TEST_GROUP,
        ),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists(RAILS_HELPER):
            self.run_if_available(
                "bundle exec rails generate rspec:install --help > /dev/null 2>&1",
                "bin/rails generate rspec:install",
                "rspec-rails generator",
            )

        t.write_file(FACTORY_BOT_SUPPORT, FACTORY_BOT_CONFIG)

        if t.exists(RAILS_HELPER):
            t.gsub_file(RAILS_HELPER, SUPPORT_GLOB, r"\1", regex=True)
            t.append_file(RAILS_HELPER, SHOULDA_CONFIG)

        t.gsub_file("config/application.rb", TEST_UNIT_GENERATOR, RSPEC_GENERATOR)
