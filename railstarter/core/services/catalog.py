"""
Selection catalog — the questions ``railstarter new`` asks, in order.

1. CSS framework (bootstrap / tailwind / none), unless a template preset
   already chose it
2. Authentication (devise / Rails 8 native / none), then the Devise
   version when Devise was picked
3. One yes/no toggle per remaining feature; some are only offered when
   an earlier answer made them possible

Every "yes" is recorded in the dependency ledger right away, through
the installer's own declaration (or a request marker for features
without a gem), so later conditions see it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from railstarter.core.services.installers import INSTALLERS
from railstarter.core.services.ledger import DependencyLedger
from railstarter.core.services.selector import ChoiceGroup, FeatureSelector

logger = logging.getLogger(__name__)

DEVISE_FOR_ADMIN = "~> 4.9"

CSS_GROUP = ChoiceGroup(
    gate="css",
    gate_prompt="Install CSS framework? (y/n)",
    choice_prompt="Choose CSS framework? (b = bootstrap, t = tailwind, v = vanilla/none)",
    options={"b": "bootstrap", "t": "tailwind", "v": None, "n": None},
)


def auth_group(rails_major: int | None) -> ChoiceGroup:
    """The authentication question; Rails 8 native is only offered on Rails 8+."""
    if rails_major is not None and rails_major >= 8:
        return ChoiceGroup(
            gate="auth",
            gate_prompt="Install authentication? (y/n)",
            choice_prompt="Choose authentication? (d = devise, r = rails 8 native, n = none)",
            options={"d": "devise", "r": "authentication", "n": None},
        )
    return ChoiceGroup(
        gate="auth",
        gate_prompt="Install authentication? (y/n)",
        choice_prompt="Choose authentication? (d = devise, n = none)",
        options={"d": "devise", "n": None},
    )


def _devise_for_admin(ledger: DependencyLedger) -> bool:
    devise = ledger.find("devise")
    return devise is not None and devise.constraint == DEVISE_FOR_ADMIN


def _bootstrap_declared(ledger: DependencyLedger) -> bool:
    return ledger.is_declared("bootstrap")


@dataclass(frozen=True)
class Toggle:
    """A yes/no feature question, optionally gated on the ledger."""

    key: str
    prompt: str
    condition: Callable[[DependencyLedger], bool] | None = None

    def offered(self, ledger: DependencyLedger) -> bool:
        return self.condition is None or self.condition(ledger)


TOGGLES: tuple[Toggle, ...] = (
    Toggle("admin", "Install Active Admin (devise required)? (y/n)", _devise_for_admin),
    Toggle("dev_tools", "Install dev tools ('Better Errors', 'Annotate', 'Rubocop')? (y/n)"),
    Toggle("friendly_urls", "Install Friendly URLs (FriendlyId)? (y/n)"),
    Toggle("image_uploading_cloudinary", "Install image uploading with Cloudinary? (y/n)"),
    Toggle("navbar", "Install NavBar? (y/n)", _bootstrap_declared),
    Toggle("pagination", "Install Pagy pagination? (y/n)"),
    Toggle("ruby_llm", "Install ruby_llm? (y/n)"),
    Toggle("security", "Install security? (y/n)"),
    Toggle("testing", "Install testing? (y/n)"),
)


@dataclass
class Selection:
    """What the user picked."""

    css: str | None = None
    auth: str | None = None
    devise_constraint: str | None = None
    toggles: dict[str, bool] = field(default_factory=dict)
    prompts_issued: int = 0

    @property
    def chosen(self) -> list[str]:
        keys = [k for k in (self.css, self.auth) if k]
        return keys + [key for key, on in self.toggles.items() if on]

    def to_dict(self) -> dict[str, Any]:
        return {
            "css": self.css,
            "auth": self.auth,
            "devise_constraint": self.devise_constraint,
            "toggles": self.toggles,
            "chosen": self.chosen,
            "prompts_issued": self.prompts_issued,
        }


def record(key: str, ledger: DependencyLedger, constraints: dict[str, str] | None = None) -> None:
    """Write the ledger entry that makes ``key``'s installer run later."""
    installer = INSTALLERS[key]
    if installer.trigger is None:
        ledger.request(key)
    else:
        installer.declare_dependencies(ledger, constraints)


def choose_devise_version(selector: FeatureSelector) -> str | None:
    """``DEVISE=true`` pins the ActiveAdmin-compatible 4.9; otherwise ask."""
    if selector.override("devise") is True:
        logger.info("DEVISE=true: pinning Devise %s for ActiveAdmin compatibility", DEVISE_FOR_ADMIN)
        return DEVISE_FOR_ADMIN
    answer = selector.ask(
        "Use Devise v4.9 for Active Admin? (y = yes, n = latest version)", ["y", "n"],
    )
    return DEVISE_FOR_ADMIN if answer == "y" else None


def select_features(
    selector: FeatureSelector,
    ledger: DependencyLedger,
    template: str = "custom",
) -> Selection:
    """Ask every question in catalog order and record the answers."""
    selection = Selection()

    # 1. CSS
    if template in ("bootstrap", "tailwind"):
        selection.css = template
    else:
        selection.css = selector.choose(CSS_GROUP)
        if selection.css:
            record(selection.css, ledger)

    # 2. Authentication
    rails_major = ledger.manifest().rails_major_version()
    selection.auth = selector.choose(auth_group(rails_major))
    if selection.auth == "devise":
        selection.devise_constraint = choose_devise_version(selector)
        constraints = {"devise": selection.devise_constraint} if selection.devise_constraint else None
        record("devise", ledger, constraints)
    elif selection.auth:
        record(selection.auth, ledger)

    # 3. Toggles
    for toggle in TOGGLES:
        if not toggle.offered(ledger):
            logger.debug("%s not offered", toggle.key)
            continue
        wanted = selector.resolve(toggle.key, toggle.prompt)
        selection.toggles[toggle.key] = wanted
        if wanted:
            record(toggle.key, ledger)

    selection.prompts_issued = selector.prompts_issued
    logger.info("Selected: %s", ", ".join(selection.chosen) or "nothing")
    return selection
