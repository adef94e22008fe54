"""
Gemfile model — dependencies, groups and anchored insertion.

The Manifest keeps the Gemfile as ordered lines so that a render of an
untouched manifest reproduces the file byte for byte. Parsed
dependencies are derived from those lines; nothing else in the file
(sources, comments, ``ruby`` pins) is interpreted.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field

DEV_TEST_GROUP = "group :development, :test do"
DEV_GROUP = "group :development do"

_GEM_LINE = re.compile(r"""^\s*gem\s+["']([^"']+)["']\s*(.*)$""")
_GROUP_OPEN = re.compile(r"^\s*group\s+(.+?)\s+do\s*$")
_BLOCK_END = re.compile(r"^\s*end\b")
_OPTION = re.compile(r"""^:?(\w+)(?::|\s*=>)\s*(.+)$""")
_QUOTED = re.compile(r"""^["'](.*)["']$""")

INDENT = "  "


def _gem_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"""^\s*gem\s+["']{re.escape(name)}["']""", re.MULTILINE)


def _parse_value(raw: str) -> str | bool:
    raw = raw.strip()
    if raw == "true":
        return True
    if raw == "false":
        return False
    quoted = _QUOTED.match(raw)
    return quoted.group(1) if quoted else raw


class Dependency(BaseModel):
    """One ``gem`` declaration."""

    name: str
    constraint: str | None = None
    options: dict[str, str | bool] = Field(default_factory=dict)
    group: str | None = None   # e.g. "development, test"; None = top level

    def render(self) -> str:
        """The Gemfile line, without indentation."""
        parts = [f'gem "{self.name}"']
        if self.constraint:
            parts.append(f'"{self.constraint}"')
        for key, value in self.options.items():
            if isinstance(value, bool):
                parts.append(f"{key}: {str(value).lower()}")
            else:
                parts.append(f'{key}: "{value}"')
        return ", ".join(parts)

    @classmethod
    def parse_line(cls, line: str, group: str | None = None) -> Dependency | None:
        """Parse a ``gem`` line; returns None for anything else."""
        match = _GEM_LINE.match(line)
        if not match:
            return None
        name, rest = match.group(1), match.group(2)
        rest = rest.split("#", 1)[0].strip().lstrip(",").strip()

        constraints: list[str] = []
        options: dict[str, str | bool] = {}
        for arg in (a.strip() for a in rest.split(",") if a.strip()):
            option = _OPTION.match(arg)
            if option and not _QUOTED.match(arg):
                options[option.group(1)] = _parse_value(option.group(2))
            else:
                constraints.append(str(_parse_value(arg)))

        return cls(
            name=name,
            constraint=", ".join(constraints) or None,
            options=options,
            group=group,
        )


class Manifest:
    """Structured, order-preserving view of a Gemfile."""

    def __init__(self, lines: list[str], trailing_newline: bool = True):
        self.lines = lines
        self._trailing_newline = trailing_newline

    @classmethod
    def parse(cls, text: str) -> Manifest:
        return cls(text.splitlines(), trailing_newline=text.endswith("\n") or not text)

    def render(self) -> str:
        text = "\n".join(self.lines)
        return text + "\n" if self._trailing_newline and self.lines else text

    # ── Queries ─────────────────────────────────────────────────

    @property
    def dependencies(self) -> list[Dependency]:
        deps: list[Dependency] = []
        group: str | None = None
        for line in self.lines:
            opened = _GROUP_OPEN.match(line)
            if opened:
                group = opened.group(1).replace(":", "").strip()
                continue
            if group is not None and _BLOCK_END.match(line) and not line.startswith(INDENT):
                group = None
                continue
            dep = Dependency.parse_line(line, group=group)
            if dep is not None:
                deps.append(dep)
        return deps

    def has(self, name: str) -> bool:
        """Whether an uncommented ``gem "name"`` line exists.

        Tolerates single or double quotes, indentation and any trailing
        version or source qualifiers.
        """
        return bool(_gem_pattern(name).search(self.render()))

    def find(self, name: str) -> Dependency | None:
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None

    def rails_major_version(self) -> int | None:
        """Major Rails version from the ``gem "rails"`` constraint, if pinned."""
        rails = self.find("rails")
        if rails is None or not rails.constraint:
            return None
        digits = re.search(r"(\d+)", rails.constraint)
        return int(digits.group(1)) if digits else None

    def index_of(self, marker: str) -> int | None:
        for i, line in enumerate(self.lines):
            if line.strip() == marker.strip():
                return i
        return None

    # ── Mutations ───────────────────────────────────────────────

    def insert(
        self,
        deps: list[Dependency],
        before: str | None = None,
        after: str | None = None,
    ) -> list[str]:
        """Insert the missing ``deps`` at an anchor line.

        ``before=marker`` places a top-level block (followed by a blank
        line) just above the marker; ``after=marker`` places indented
        lines inside the block the marker opens. With no anchor the
        block goes at the end of the file.

        Missing anchors: ``before`` falls back to the end of the file,
        ``after`` appends a new ``marker ... end`` block.

        Returns the names that were actually inserted.
        """
        missing: list[Dependency] = []
        for dep in deps:
            if not self.has(dep.name) and dep.name not in {m.name for m in missing}:
                missing.append(dep)
        if not missing:
            return []

        if after is not None:
            index = self.index_of(after)
            body = [INDENT + dep.render() for dep in missing]
            if index is None:
                self._append_block([after.strip(), *body, "end"])
            else:
                self.lines[index + 1:index + 1] = body
        elif before is not None:
            index = self.index_of(before)
            body = [dep.render() for dep in missing]
            if index is None:
                self._append_block(body)
            else:
                self.lines[index:index] = [*body, ""]
        else:
            self._append_block([dep.render() for dep in missing])

        return [dep.name for dep in missing]

    def drop(self, name: str) -> bool:
        """Remove every ``gem "name"`` line. Returns whether anything changed."""
        pattern = _gem_pattern(name)
        kept = [line for line in self.lines if not pattern.match(line)]
        changed = len(kept) != len(self.lines)
        self.lines = kept
        return changed

    def _append_block(self, block: list[str]) -> None:
        if self.lines and self.lines[-1].strip():
            self.lines.append("")
        self.lines.extend(block)

    def to_dict(self) -> dict[str, Any]:
        return {"dependencies": [dep.model_dump() for dep in self.dependencies]}
