"""ActiveAdmin dashboard, authenticated through Devise."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller, Placement, PrerequisiteMissing
from railstarter.core.models.feature import MarkerRule
from railstarter.core.models.manifest import DEV_TEST_GROUP, Dependency

ADMIN_ROUTE = "devise_for :admin_users, ActiveAdmin::Devise.config"
DEVISE_ARTIFACTS = ("config/initializers/devise.rb", "app/models/user.rb")


class AdminInstaller(FeatureInstaller):
    key = "admin"
    title = "ActiveAdmin"
    commit_message = "feat: install active admin."
    trigger = "activeadmin"
    marker = MarkerRule(files_all_of=["config/initializers/active_admin.rb"])
    dependencies = (
        Placement(deps=(Dependency(name="activeadmin"),), before=DEV_TEST_GROUP),
    )

    def check_prerequisites(self) -> None:
        if not any(self.toolkit.exists(path) for path in DEVISE_ARTIFACTS):
            raise PrerequisiteMissing(
                "Devise is required before ActiveAdmin "
                f"(neither {' nor '.join(DEVISE_ARTIFACTS)} exists)"
            )

    def write_artifacts(self) -> None:
        t = self.toolkit

        t.generate("active_admin:install")

        if not t.exists("app/models/admin_user.rb"):
            t.generate("devise", "AdminUser")

        if not t.contains("config/routes.rb", "devise_for :admin_users"):
            t.route(ADMIN_ROUTE)

        self.notice("Dashboard at /admin (admin@example.com / password once seeded)")
