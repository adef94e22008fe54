"""
Feature installers — one module per optional feature.

``INSTALL_ORDER`` is the order ``railstarter new`` runs them in: styling
first (later installers style their views by probing for it), then
authentication, then everything that may build on a User model.
"""

from __future__ import annotations

from railstarter.core.engine.installer import FeatureInstaller
from railstarter.core.services.installers.admin import AdminInstaller
from railstarter.core.services.installers.authentication import AuthenticationInstaller
from railstarter.core.services.installers.bootstrap import BootstrapInstaller
from railstarter.core.services.installers.dev_tools import DevToolsInstaller
from railstarter.core.services.installers.devise import DeviseInstaller
from railstarter.core.services.installers.friendly_urls import FriendlyUrlsInstaller
from railstarter.core.services.installers.image_uploading_cloudinary import ImageUploadInstaller
from railstarter.core.services.installers.navbar import NavbarInstaller
from railstarter.core.services.installers.pagination import PaginationInstaller
from railstarter.core.services.installers.ruby_llm import RubyLlmInstaller
from railstarter.core.services.installers.security import SecurityInstaller
from railstarter.core.services.installers.tailwind import TailwindInstaller
from railstarter.core.services.installers.testing import RspecInstaller

INSTALL_ORDER: tuple[type[FeatureInstaller], ...] = (
    BootstrapInstaller,
    TailwindInstaller,
    DeviseInstaller,
    AuthenticationInstaller,
    AdminInstaller,
    DevToolsInstaller,
    FriendlyUrlsInstaller,
    ImageUploadInstaller,
    NavbarInstaller,
    PaginationInstaller,
    RubyLlmInstaller,
    SecurityInstaller,
    RspecInstaller,
)

INSTALLERS: dict[str, type[FeatureInstaller]] = {cls.key: cls for cls in INSTALL_ORDER}


def get_installer(key: str) -> type[FeatureInstaller] | None:
    """Look up an installer class by feature key."""
    return INSTALLERS.get(key)


__all__ = [
    "INSTALLERS",
    "INSTALL_ORDER",
    "AdminInstaller",
    "AuthenticationInstaller",
    "BootstrapInstaller",
    "DevToolsInstaller",
    "DeviseInstaller",
    "FeatureInstaller",
    "FriendlyUrlsInstaller",
    "ImageUploadInstaller",
    "NavbarInstaller",
    "PaginationInstaller",
    "RspecInstaller",
    "RubyLlmInstaller",
    "SecurityInstaller",
    "TailwindInstaller",
    "get_installer",
]
