"""Devise authentication on a User model."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency

APPLICATION_CONTROLLER = "app/controllers/application_controller.rb"
PAGES_CONTROLLER = "app/controllers/pages_controller.rb"
REGISTRATION_EDIT = "app/views/devise/registrations/edit.html.erb"

CANCEL_LINK = (
    '<p>Unhappy? <%= link_to "Cancel my account", registration_path(resource_name), '
    'data: { confirm: "Are you sure?" }, method: :delete %></p>'
)

_CANCEL_BUTTON = """\
<div class="{wrapper}">
  <div>Unhappy?</div>
  <%= button_to "Cancel my account", registration_path(resource_name), \
data: {{ confirm: "Are you sure?" }}, method: :delete{button} %>
</div>"""

CANCEL_BUTTON_STYLES = {
    "bootstrap": ("d-flex align-items-center", ', class: "btn btn-link"'),
    "tailwind": ("flex items-center gap-2", ', class: "text-blue-600 hover:underline"'),
    None: ("cancel-account", ""),
}


def cancel_button(css_framework: str | None) -> str:
    wrapper, button = CANCEL_BUTTON_STYLES.get(css_framework, CANCEL_BUTTON_STYLES[None])
    return _CANCEL_BUTTON.format(wrapper=wrapper, button=button)


class DeviseInstaller(FeatureInstaller):
    key = "devise"
    title = "Devise"
    commit_message = "feat: install devise."
    trigger = "devise"
    marker = MarkerRule(
        manifest_all_of=["devise"],
        files_all_of=["config/initializers/devise.rb", "app/models/user.rb"],
    )
    dependencies = (
        Placement(deps=(Dependency(name="devise"),), before=DEV_TEST_GROUP),
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists("config/initializers/devise.rb"):
            t.generate("devise:install")
        if not t.exists("app/models/user.rb"):
            t.generate("devise", "User")

        t.inject_into_file(
            APPLICATION_CONTROLLER,
            "  before_action :authenticate_user!\n",
            after="class ApplicationController < ActionController::Base\n",
        )

        if t.exists(PAGES_CONTROLLER):
            t.inject_into_file(
                PAGES_CONTROLLER,
                "  skip_before_action :authenticate_user!, only: [ :home ]\n",
                after="class PagesController < ApplicationController\n",
            )
        else:
            self.notice("No PagesController, the home page will require sign-in")

        if not t.exists("app/views/devise"):
            t.generate("devise:views")

        if t.exists(REGISTRATION_EDIT):
            t.gsub_file(REGISTRATION_EDIT, CANCEL_LINK, cancel_button(self.css_framework))
