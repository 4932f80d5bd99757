"""JSON export helpers."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable

from hb_cli.core.models import HealthLogEntry


def entries_payload(entries: Iterable[HealthLogEntry], start: date, end: date) -> Dict[str, Any]:
    """Serializable report body for a date range."""
    rows = [entry.to_dict() for entry in entries]
    return {
        "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
        "count": len(rows),
        "entries": rows,
    }


def write_json(path: Path, payload: Any) -> Path:
    """Write payload as pretty JSON and return path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n")
    return path
