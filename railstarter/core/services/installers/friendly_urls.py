"""FriendlyId slugs on a configurable model."""

from __future__ import annotations

import re

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency


def underscore(name: str) -> str:
    """``AdminUser`` → ``admin_user``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


class FriendlyUrlsInstaller(FeatureInstaller):
    key = "friendly_urls"
    title = "Friendly URLs (FriendlyId)"
    commit_message = "feat: install friendly id."
    trigger = "friendly_id"
    marker = MarkerRule(
        manifest_all_of=["friendly_id"],
        files_all_of=["config/initializers/friendly_id.rb"],
        globs_all_of=["db/migrate/*_create_friendly_id_slugs.rb"],
    )
    dependencies = (
        Placement(deps=(Dependency(name="friendly_id"),), before=DEV_TEST_GROUP),
    )

    @property
    def model_file(self) -> str:
        return f"app/models/{underscore(self.config.friendly_urls.model)}.rb"

    def is_installed(self) -> bool:
        if not super().is_installed():
            return False
        # a model created after the first run still needs its slug
        t = self.toolkit
        return not t.exists(self.model_file) or t.contains(self.model_file, "friendly_id")

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists("config/initializers/friendly_id.rb"):
            t.generate("friendly_id")

        self._slug_model()

    def _slug_model(self) -> None:
        t = self.toolkit
        model = self.config.friendly_urls.model
        attribute = self.config.friendly_urls.slug_from
        model_file = self.model_file

        if not t.exists(model_file):
            self.notice(
                f"{model_file} not found, slugs not wired. "
                f"Create the model, then re-apply {self.key}."
            )
            return

        if t.contains(model_file, "friendly_id"):
            return

        table = pluralize(underscore(model))
        if not t.glob(f"db/migrate/*_add_slug_to_{table}.rb"):
            camel_table = "".join(part.capitalize() for part in table.split("_"))
            t.generate("migration", f"AddSlugTo{camel_table}", "slug:uniq")

        t.inject_into_file(
            model_file,
            f"  extend FriendlyId\n  friendly_id :{attribute}, use: :slugged\n",
            after=f"class {model} < ApplicationRecord\n",
        )
