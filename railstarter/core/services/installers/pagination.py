"""Pagy pagination."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency

PAGY_INITIALIZER = "config/initializers/pagy.rb"


class PaginationInstaller(FeatureInstaller):
    key = "pagination"
    title = "Pagination (Pagy)"
    commit_message = "feat: install pagy pagination."
    trigger = "pagy"
    marker = MarkerRule(manifest_all_of=["pagy"], files_all_of=[PAGY_INITIALIZER])
    dependencies = (
        Placement(deps=(Dependency(name="pagy"),), before=DEV_TEST_GROUP),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists(PAGY_INITIALIZER):
            self.run_if_available(
                "bundle exec rails generate pagy:install --help > /dev/null 2>&1",
                "bundle exec rails generate pagy:install",
                "Pagy generator",
            )

        t.inject_into_file(
            "app/controllers/application_controller.rb",
            "  include Pagy::Backend\n",
            after="class ApplicationController < ActionController::Base\n",
        )
        if t.exists("app/helpers/application_helper.rb"):
            t.inject_into_file(
                "app/helpers/application_helper.rb",
                "  include Pagy::Frontend\n",
                after="module ApplicationHelper\n",
            )
