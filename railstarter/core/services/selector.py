"""
Feature selector — decide, per feature, whether to install it.

An explicit override (``DEVISE=true`` in the environment, or the
config file's ``features:`` mapping) always wins and suppresses the
prompt. Without one, the user is asked. Only an explicit "y"/"yes"
counts as yes.

Prompting is behind the ``Prompter`` protocol so that the selector can
be driven by click in the terminal and by a script in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import click

logger = logging.getLogger(__name__)

AFFIRMATIVE = ("y", "yes")


class Prompter(Protocol):
    """Asks the user questions."""

    def confirm(self, text: str) -> bool:
        """Yes/no question; anything but an explicit yes is no."""
        ...

    def choose(self, text: str, tokens: Sequence[str]) -> str:
        """Enumerated question; returns one of ``tokens``."""
        ...


class ClickPrompter:
    """Interactive prompter on the terminal.

    ``click.Choice`` rejects anything outside the token set and asks
    again, so ``choose`` only ever returns a valid token.
    """

    def confirm(self, text: str) -> bool:
        answer = click.prompt(text, default="", show_default=False)
        return answer.strip().lower() in AFFIRMATIVE

    def choose(self, text: str, tokens: Sequence[str]) -> str:
        answer = click.prompt(
            text,
            type=click.Choice(list(tokens), case_sensitive=False),
            show_choices=False,
        )
        return answer.lower()


@dataclass(frozen=True)
class ChoiceGroup:
    """Mutually exclusive options behind a yes/no gate.

    ``options`` maps each accepted token to a feature key; a token
    mapped to None means "none of them".
    """

    gate: str
    gate_prompt: str
    choice_prompt: str
    options: dict[str, str | None]

    @property
    def tokens(self) -> list[str]:
        return list(self.options)

    @property
    def option_keys(self) -> list[str]:
        return [key for key in self.options.values() if key is not None]


class FeatureSelector:
    """Resolves features from overrides first, prompts second."""

    def __init__(self, overrides: Mapping[str, bool], prompter: Prompter):
        self.overrides = dict(overrides)
        self.prompter = prompter
        self.prompts_issued = 0

    def override(self, key: str) -> bool | None:
        return self.overrides.get(key)

    def resolve(self, feature_key: str, prompt_text: str) -> bool:
        """Whether to install ``feature_key``.

        Override true/false → that answer, no prompt. Otherwise ask.
        """
        forced = self.overrides.get(feature_key)
        if forced is not None:
            logger.info("%s=%s from override", feature_key.upper(), str(forced).lower())
            return forced

        self.prompts_issued += 1
        return self.prompter.confirm(prompt_text)

    def ask(self, prompt_text: str, tokens: Sequence[str]) -> str:
        """Enumerated question with no override attached."""
        self.prompts_issued += 1
        return self.prompter.choose(prompt_text, tokens)

    def choose(self, group: ChoiceGroup) -> str | None:
        """Pick one option of ``group``, or None.

        1. gate overridden to false → None
        2. an option overridden to true → that option
        3. gate not overridden → yes/no gate prompt; no → None
        4. enumerated prompt; a "none" token → None
        """
        if self.overrides.get(group.gate) is False:
            logger.info("%s=false from override", group.gate.upper())
            return None

        for key in group.option_keys:
            if self.overrides.get(key) is True:
                logger.info("%s=true from override", key.upper())
                return key

        if not self.resolve(group.gate, group.gate_prompt):
            return None

        token = self.ask(group.choice_prompt, group.tokens)
        chosen = group.options.get(token)
        if chosen is not None and self.overrides.get(chosen) is False:
            logger.info("%s chosen but %s=false, skipping", chosen, chosen.upper())
            return None
        return chosen
