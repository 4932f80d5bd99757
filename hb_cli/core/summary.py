"""Weekly summary aggregation and rendering."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from hb_cli.core.models import ExerciseData, HealthLogEntry
from hb_cli.utils.date_ranges import in_date_range
from hb_cli.utils.formatting import (
    format_date_range,
    format_entry_details,
    format_minutes,
    format_timestamp,
)


@dataclass(frozen=True)
class WeeklySummary:
    """Aggregate view of health log entries over a date range."""

    start_date: date
    end_date: date
    exercise_count: int
    average_exercise_duration: float
    exercise_types: Dict[str, int]
    food_log_count: int
    latest_exercise: Optional[HealthLogEntry] = None
    latest_food: Optional[HealthLogEntry] = None
    entries: List[HealthLogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "exerciseCount": self.exercise_count,
            "averageExerciseDuration": self.average_exercise_duration,
            "exerciseTypes": dict(self.exercise_types),
            "foodLogCount": self.food_log_count,
            "latestExercise": self.latest_exercise.to_dict() if self.latest_exercise else None,
            "latestFood": self.latest_food.to_dict() if self.latest_food else None,
        }


def filter_entries(entries: Iterable[HealthLogEntry], start: date, end: date) -> List[HealthLogEntry]:
    """Entries inside the inclusive date range, oldest first."""
    selected = [entry for entry in entries if in_date_range(entry.timestamp, start, end)]
    selected.sort(key=lambda entry: entry.timestamp)
    return selected


def _latest(entries: List[HealthLogEntry], category: str) -> Optional[HealthLogEntry]:
    matching = [entry for entry in entries if entry.category == category]
    return matching[-1] if matching else None


def build_weekly_summary(entries: Iterable[HealthLogEntry], start: date, end: date) -> WeeklySummary:
    """Aggregate entries into counts, averages and an exercise-type histogram."""
    selected = filter_entries(entries, start, end)
    exercise = [entry for entry in selected if entry.category == "exercise"]
    food = [entry for entry in selected if entry.category == "food"]

    total_duration = 0
    types: Counter = Counter()
    for entry in exercise:
        data = entry.processed if isinstance(entry.processed, ExerciseData) else ExerciseData()
        # Entries without a duration still count toward the average.
        total_duration += data.duration or 0
        types[data.type or "unknown"] += 1

    average = total_duration / len(exercise) if exercise else 0.0

    return WeeklySummary(
        start_date=start,
        end_date=end,
        exercise_count=len(exercise),
        average_exercise_duration=round(average, 2),
        exercise_types=dict(types.most_common()),
        food_log_count=len(food),
        latest_exercise=_latest(selected, "exercise"),
        latest_food=_latest(selected, "food"),
        entries=selected,
    )


def summary_to_markdown(summary: WeeklySummary) -> str:
    """Render a weekly summary as markdown."""
    lines: List[str] = [
        "# Weekly Health Summary",
        "",
        f"_{format_date_range(summary.start_date, summary.end_date)}_",
        "",
        f"- **Exercise sessions:** {summary.exercise_count}",
        f"- **Average duration:** {format_minutes(summary.average_exercise_duration)}",
        f"- **Food logs:** {summary.food_log_count}",
        "",
        "## Exercise Types",
    ]

    if summary.exercise_types:
        for exercise_type, count in summary.exercise_types.items():
            lines.append(f"- {exercise_type}: {count}x")
    else:
        lines.append("No exercise logged")

    for title, entry in (("Latest Exercise", summary.latest_exercise), ("Latest Food Log", summary.latest_food)):
        if entry is None:
            continue
        lines.extend(
            [
                "",
                f"## {title}",
                f"{format_timestamp(entry.timestamp)} - {format_entry_details(entry)}",
            ]
        )

    lines.append("")
    return "\n".join(lines)
