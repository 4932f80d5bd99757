"""Local JSON-lines store for health log entries."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from hb_cli.core.models import HealthLogEntry

logger = logging.getLogger(__name__)


class HealthLogStore:
    """Append-only file with one serialized entry per line."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, entry: HealthLogEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry.to_dict()) + "\n")

    def load(self) -> List[HealthLogEntry]:
        """Read all entries, oldest first; unreadable lines are skipped."""
        if not self.path.exists():
            return []

        entries: List[HealthLogEntry] = []
        with self.path.open(encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, 1):
                if not line.strip():
                    continue
                try:
                    entries.append(HealthLogEntry.from_dict(json.loads(line)))
                except (ValueError, KeyError, TypeError) as exc:
                    logger.warning("Skipping line %d of %s: %s", line_no, self.path, exc)

        entries.sort(key=lambda entry: entry.timestamp)
        return entries
