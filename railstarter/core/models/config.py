"""
Starter configuration — loaded from .railstarter.yml.

Everything here is optional: a project with no config file runs with
the defaults below and the feature overrides taken from the
environment.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Template = Literal["custom", "bootstrap", "tailwind"]


class FriendlyUrlsSettings(BaseModel):
    """Which model gets slugged URLs, and from which attribute."""

    model: str = "User"
    slug_from: str = "email"


class ImageUploadSettings(BaseModel):
    """Which model gets the uploaded image attachment."""

    model: str = "User"
    attachment: str = "photo"


class MailerSettings(BaseModel):
    """Hosts for ``action_mailer.default_url_options``."""

    development_host: str = "http://localhost:3000"
    production_host: str = "http://TODO_PUT_YOUR_DOMAIN_HERE"


class StarterConfig(BaseModel):
    """Resolved configuration for one run against one Rails project."""

    project_root: str = "."
    template: Template = "custom"

    # FEATURE_KEY -> forced answer; merged from the file and the environment
    overrides: dict[str, bool] = Field(default_factory=dict)

    friendly_urls: FriendlyUrlsSettings = Field(default_factory=FriendlyUrlsSettings)
    image_upload: ImageUploadSettings = Field(default_factory=ImageUploadSettings)
    mailer: MailerSettings = Field(default_factory=MailerSettings)

    audit: bool = True
