"""CSV export of health log entries."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from hb_cli.core.models import ExerciseData, FoodData, HealthLogEntry

FIELDS = [
    "id",
    "timestamp",
    "category",
    "type",
    "duration",
    "distance",
    "description",
    "confidence",
    "rawMessage",
]


def write_csv(path: Path, entries: Iterable[HealthLogEntry]) -> Path:
    """Write one row per entry and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=FIELDS)
        writer.writeheader()
        for entry in entries:
            exercise = entry.processed if isinstance(entry.processed, ExerciseData) else None
            food = entry.processed if isinstance(entry.processed, FoodData) else None
            writer.writerow(
                {
                    "id": entry.id,
                    "timestamp": entry.timestamp.isoformat(),
                    "category": entry.category,
                    "type": exercise.type if exercise else None,
                    "duration": exercise.duration if exercise else None,
                    "distance": exercise.distance if exercise else None,
                    "description": food.description if food else None,
                    "confidence": entry.confidence,
                    "rawMessage": entry.raw_message,
                }
            )
    return path
