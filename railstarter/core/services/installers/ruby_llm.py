"""ruby_llm client configuration."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency

INITIALIZER = "config/initializers/ruby_llm.rb"

RUBY_LLM_CONFIG = """\
RubyLLM.configure do |config|
  # Add keys ONLY for the providers you intend to use.
  # Using environment variables is highly recommended.
  config.openai_api_key = ENV.fetch('OPENAI_API_KEY', nil)
  # config.anthropic_api_key = ENV.fetch('ANTHROPIC_API_KEY', nil)
end
"""

OPENAI_ENV = "# OPENAI_API_KEY=replace_with_your_openai_key\n"


class RubyLlmInstaller(FeatureInstaller):
    key = "ruby_llm"
    title = "ruby_llm"
    commit_message = "feat: install ruby_llm."
    trigger = "ruby_llm"
    runs_migrations = False
    marker = MarkerRule(files_all_of=[INITIALIZER])
    dependencies = (
        Placement(deps=(Dependency(name="ruby_llm"),), before=DEV_TEST_GROUP),
    )

    def write_artifacts(self) -> None:
        self.toolkit.write_file(INITIALIZER, RUBY_LLM_CONFIG)
        self.toolkit.append_file(".env", OPENAI_ENV)
