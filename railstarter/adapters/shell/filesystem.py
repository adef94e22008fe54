"""
Filesystem adapter — the Thor-style edits installers make to a Rails tree.

    write    create a file (``overwrite`` to replace one)
    append   add to the end of a file, creating it if needed
    inject   insert before/after a literal anchor (routes.rb, application.rb)
    gsub     replace a literal or regex pattern
    remove   delete a file or directory
    mkdir    create a directory
    touch    create an empty file

Each edit is idempotent on its own: when its result is already in the
file, the receipt is ``skipped`` with ``metadata["changed"] = False``
and nothing is written. A missing inject anchor is reported the same
way, with ``anchor_missing`` set, so the caller can warn.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from railstarter.adapters.base import Adapter, ExecutionContext
from railstarter.core.models.action import Receipt

logger = logging.getLogger(__name__)

NEEDS_CONTENT = ("write", "append", "inject")


class Unchanged(Exception):
    """The edit has nothing to do."""

    def __init__(self, reason: str, **extra: Any):
        self.extra = extra
        super().__init__(reason)


def _present(content: str, existing: str) -> bool:
    return bool(content.strip()) and content.strip() in existing


def _write(target: Path, p: dict[str, Any]) -> str:
    content = p["content"]
    if target.is_file():
        if target.read_text(encoding="utf-8") == content:
            raise Unchanged("identical content")
        if not p.get("overwrite", False):
            raise Unchanged("file exists")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return f"wrote {target}"


def _append(target: Path, p: dict[str, Any]) -> str:
    content = p["content"]
    existing = target.read_text(encoding="utf-8") if target.is_file() else ""
    if _present(content, existing):
        raise Unchanged("content already present")
    if existing and not existing.endswith("\n"):
        content = "\n" + content
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(existing + content, encoding="utf-8")
    return f"appended to {target}"


def _inject(target: Path, p: dict[str, Any]) -> str:
    content, after, before = p["content"], p.get("after"), p.get("before")
    existing = target.read_text(encoding="utf-8")
    if _present(content, existing):
        raise Unchanged("content already present")

    anchor = after or before
    index = existing.find(anchor)
    if index < 0:
        raise Unchanged(f"anchor not found: {anchor.strip()!r}", anchor_missing=True)
    if after:
        index += len(after)
    target.write_text(existing[:index] + content + existing[index:], encoding="utf-8")
    return f"injected into {target}"


def _gsub(target: Path, p: dict[str, Any]) -> str:
    if not target.is_file():
        raise Unchanged("file not found")
    existing = target.read_text(encoding="utf-8")
    if p.get("regex", False):
        updated, count = re.subn(p["pattern"], p["replacement"], existing, flags=re.MULTILINE)
    else:
        count = existing.count(p["pattern"])
        updated = existing.replace(p["pattern"], p["replacement"])
    if updated == existing:
        raise Unchanged("no match")
    target.write_text(updated, encoding="utf-8")
    return f"replaced {count} occurrence(s) in {target}"


def _remove(target: Path, p: dict[str, Any]) -> str:
    if not target.exists():
        raise Unchanged("already absent")
    if target.is_dir():
        shutil.rmtree(target)
    else:
        target.unlink()
    return f"removed {target}"


def _mkdir(target: Path, p: dict[str, Any]) -> str:
    if target.is_dir():
        raise Unchanged("directory exists")
    target.mkdir(parents=True)
    return f"created {target}/"


def _touch(target: Path, p: dict[str, Any]) -> str:
    if target.exists():
        raise Unchanged("file exists")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.touch()
    return f"created {target}"


OPERATIONS: dict[str, Callable[[Path, dict[str, Any]], str]] = {
    "write": _write,
    "append": _append,
    "inject": _inject,
    "gsub": _gsub,
    "remove": _remove,
    "mkdir": _mkdir,
    "touch": _touch,
}


class FilesystemAdapter(Adapter):
    """Action params: ``operation``, ``path`` (relative to the project root), plus per-operation params."""

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        p = context.params
        operation = p.get("operation")
        if operation not in OPERATIONS:
            return False, f"Unknown operation {operation!r}. Valid: {', '.join(OPERATIONS)}"
        if not p.get("path"):
            return False, "Missing required param: 'path'"
        if operation in NEEDS_CONTENT and "content" not in p:
            return False, f"{operation} needs 'content'"
        if operation == "inject" and not (p.get("after") or p.get("before")):
            return False, "inject needs an 'after' or 'before' anchor"
        if operation == "gsub" and not {"pattern", "replacement"} <= p.keys():
            return False, "gsub needs 'pattern' and 'replacement'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        p = context.params
        target = Path(p["path"])
        if not target.is_absolute():
            target = Path(context.working_dir) / target
        meta: dict[str, Any] = {"operation": p["operation"], "path": str(target)}

        try:
            message = OPERATIONS[p["operation"]](target, p)
        except Unchanged as e:
            return Receipt.skip(
                adapter=self.name,
                action_id=context.action.id,
                reason=str(e),
                metadata={**meta, "changed": False, **e.extra},
            )
        except (OSError, re.error) as e:
            return Receipt.failure(
                adapter=self.name, action_id=context.action.id, error=f"{e}", metadata=meta,
            )

        logger.debug(message)
        return Receipt.success(
            adapter=self.name, action_id=context.action.id, output=message, metadata={**meta, "changed": True},
        )
