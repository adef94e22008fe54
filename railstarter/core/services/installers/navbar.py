"""Le Wagon's Bootstrap navbar, rendered on every page."""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller
from railstarter.core.models.feature import MarkerRule

NAVBAR_URL = (
    "https://raw.githubusercontent.com/lewagon/awesome-navbars/master/templates/_navbar_wagon.html.erb"
)
NAVBAR_PARTIAL = "app/views/shared/_navbar.html.erb"
LAYOUT = "app/views/layouts/application.html.erb"
RENDER_NAVBAR = '<%= render "shared/navbar" %>'


class NavbarInstaller(FeatureInstaller):
    key = "navbar"
    title = "Navbar"
    commit_message = "feat: add navbar."
    runs_migrations = False
    marker = MarkerRule(
        files_all_of=[NAVBAR_PARTIAL],
        content_contains={LAYOUT: 'render "shared/navbar"'},
    )

    def write_artifacts(self) -> None:
        t = self.toolkit

        if not t.exists(NAVBAR_PARTIAL):
            t.mkdir("app/views/shared")
            t.download(NAVBAR_URL, NAVBAR_PARTIAL)

        t.inject_into_file(LAYOUT, f"{RENDER_NAVBAR}\n", after="<body>\n")
