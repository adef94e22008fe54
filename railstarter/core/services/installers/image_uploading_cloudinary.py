"""Active Storage backed by Cloudinary."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency
from railstarter.core.services.installers.friendly_urls import underscore

ACTIVE_STORAGE_MIGRATION = "db/migrate/*_create_active_storage_tables*.rb"
LOCAL_SERVICE = "config.active_storage.service = :local"
CLOUDINARY_SERVICE = "config.active_storage.service = :cloudinary"

CLOUDINARY_ENV = "# CLOUDINARY_URL=replace_with_your_cloudinary_api_key\n"

STORAGE_YML = """\

cloudinary:
  service: Cloudinary
  folder: <%= Rails.env %>
"""


class ImageUploadInstaller(FeatureInstaller):
    key = "image_uploading_cloudinary"
    title = "Image upload (Active Storage + Cloudinary)"
    commit_message = "feat: install active storage and cloudinary."
    trigger = "cloudinary"
    marker = MarkerRule(
        manifest_all_of=["cloudinary"],
        files_all_of=["config/storage.yml"],
        globs_all_of=[ACTIVE_STORAGE_MIGRATION],
    )
    dependencies = (
        Placement(deps=(Dependency(name="cloudinary"),), before=DEV_TEST_GROUP),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        t.append_file(".env", CLOUDINARY_ENV)

        if not t.glob(ACTIVE_STORAGE_MIGRATION):
            t.rails("active_storage:install")

        t.append_file("config/storage.yml", STORAGE_YML)

        for env in ("development", "production"):
            t.gsub_file(f"config/environments/{env}.rb", LOCAL_SERVICE, CLOUDINARY_SERVICE)

        self._attach()

    def _attach(self) -> None:
        t = self.toolkit
        model = self.config.image_upload.model
        attachment = self.config.image_upload.attachment
        model_file = f"app/models/{underscore(model)}.rb"

        if not t.exists(model_file):
            self.notice(f"{model_file} not found, add `has_one_attached :{attachment}` yourself")
            return

        t.inject_into_file(
            model_file,
            f"  has_one_attached :{attachment}\n",
            after=f"class {model} < ApplicationRecord\n",
        )
