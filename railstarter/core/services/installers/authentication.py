"""Rails 8 native authentication, plus the sign-up flow the generator leaves out."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller
from railstarter.core.models.feature import MarkerRule

PAGES_CONTROLLER = "app/controllers/pages_controller.rb"

REGISTRATIONS_CONTROLLER = """\
class RegistrationsController < ApplicationController
  allow_unauthenticated_access

  def new
    @user = User.new
  end

  def create
    @user = User.new(user_params)
    if @user.save
      start_new_session_for(@user)
      redirect_to root_path, notice: "Welcome!"
    else
      render :new, status: :unprocessable_content
    end
  end

  private

  def user_params
    params.require(:user).permit(:email_address, :password, :password_confirmation)
  end
end
"""

_SIGN_UP_VIEW = """\
<%= render "shared/flashes" %>
<h1>Sign up</h1>
<%= simple_form_for @user, url: registration_path do |f| %>
  <%= f.input :email_address %>
  <%= f.input :password %>
  <%= f.input :password_confirmation %>
  <%= f.button :submit, "Sign up"{button} %>
<% end %>
"""

SUBMIT_STYLES = {
    "bootstrap": ', class: "btn btn-primary my-3"',
    "tailwind": ', class: "bg-blue-500 hover:bg-blue-700 text-white font-bold py-2 px-4 rounded my-3"',
    None: "",
}


def sign_up_view(css_framework: str | None) -> str:
    return _SIGN_UP_VIEW.format(button=SUBMIT_STYLES.get(css_framework, ""))


class AuthenticationInstaller(FeatureInstaller):
    key = "authentication"
    title = "Rails 8 native authentication"
    commit_message = "feat: install rails 8 native authentication."
    marker = MarkerRule(
        files_all_of=[
            "app/controllers/concerns/authentication.rb",
            "app/models/session.rb",
            "app/models/current.rb",
        ],
    )

    def not_applicable(self) -> str | None:
        if self.ledger.is_declared("devise"):
            return "Devise is declared, skipping Rails 8 native authentication"
        return None

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists("app/controllers/concerns/authentication.rb"):
            t.generate("authentication")

        t.route("resource :registration, only: [:new, :create]")
        t.write_file("app/controllers/registrations_controller.rb", REGISTRATIONS_CONTROLLER)
        t.write_file("app/views/registrations/new.html.erb", sign_up_view(self.css_framework))

        if t.exists(PAGES_CONTROLLER):
            t.inject_into_file(
                PAGES_CONTROLLER,
                "  allow_unauthenticated_access only: :home\n",
                after="class PagesController < ApplicationController\n",
            )
