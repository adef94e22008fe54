"""
Audit ledger — which features were installed, skipped or aborted, and when.

One NDJSON line per feature result, appended to
``log/railstarter.ndjson`` in the Rails project. ``log/`` is in Rails'
default .gitignore, so the ledger never ends up in a checkpoint.
Lines are only ever appended.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from railstarter.core.models.feature import InstallResult

logger = logging.getLogger(__name__)

AUDIT_PATH = Path("log") / "railstarter.ndjson"


class AuditEntry(BaseModel):
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    operation_type: str = ""       # new | apply

    feature: str = ""
    mode: str = ""                 # standalone | embedded
    status: str = ""               # installed | skipped | aborted
    reason: str = ""
    notices: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(
        cls, result: InstallResult, operation_id: str, operation_type: str,
    ) -> AuditEntry:
        return cls(
            operation_id=operation_id,
            operation_type=operation_type,
            **result.model_dump(include={"feature", "status", "reason", "notices", "duration_ms"}),
            mode=str(result.mode),
        )


class AuditWriter:
    """Appends AuditEntry lines to the project's ledger file and reads them back."""

    def __init__(self, path: Path | None = None, project_root: Path | None = None):
        self._path = path or (project_root or Path(".")) / AUDIT_PATH

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append one entry. A write failure is logged, not raised: the install already happened."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error("Could not write audit entry to %s: %s", self._path, e)
            return
        logger.debug("Audit: %s %s %s", entry.operation_type, entry.feature, entry.status)

    def _lines(self) -> Iterator[tuple[int, str]]:
        if not self._path.is_file():
            return
        with self._path.open(encoding="utf-8") as f:
            for number, line in enumerate(f, start=1):
                if line.strip():
                    yield number, line

    def _parse(self, number: int, line: str) -> AuditEntry | None:
        try:
            return AuditEntry.model_validate(json.loads(line))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("%s:%d: skipping corrupt audit entry (%s)", self._path, number, e)
            return None

    def read_all(self) -> list[AuditEntry]:
        """Every readable entry, oldest first."""
        entries = (self._parse(number, line) for number, line in self._lines())
        return [entry for entry in entries if entry is not None]

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        recent: deque[AuditEntry] = deque(maxlen=n)
        for number, line in self._lines():
            entry = self._parse(number, line)
            if entry is not None:
                recent.append(entry)
        return list(recent)

    def entry_count(self) -> int:
        return sum(1 for _ in self._lines())
