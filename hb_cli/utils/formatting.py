"""Formatting helpers used by exports and console output."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from hb_cli.core.models import ExerciseData, FoodData, HealthLogEntry


def format_number(value: float) -> str:
    """Format a number without a trailing .0 for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_minutes(minutes: Optional[float]) -> str:
    """Format a minute count as '45 mins' or '1h 30m'."""
    if minutes is None:
        return "N/A"
    total = int(round(float(minutes)))
    if total >= 60:
        hours, rest = divmod(total, 60)
        return f"{hours}h {rest:02d}m" if rest else f"{hours}h"
    return f"{total} mins"


def format_confidence(confidence: float) -> str:
    return f"{confidence * 100:.0f}%"


def format_timestamp(moment: datetime) -> str:
    """Local time such as 'Mon, Feb 9, 3:04 PM'."""
    local = moment.astimezone()
    hour = local.strftime("%I").lstrip("0") or "12"
    return f"{local.strftime('%a, %b')} {local.day}, {hour}:{local.strftime('%M %p')}"


def format_date_range(start: date, end: date, long: bool = False) -> str:
    """'Feb 9 - Feb 15' or, with long=True, 'February 9, 2026 - February 15, 2026'."""
    if long:
        return f"{start.strftime('%B')} {start.day}, {start.year} - {end.strftime('%B')} {end.day}, {end.year}"
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}"


def format_entry_details(entry: HealthLogEntry) -> str:
    """One-line description of the structured part of an entry."""
    processed = entry.processed
    if isinstance(processed, ExerciseData):
        parts = []
        if processed.duration is not None:
            parts.append(f"{processed.duration} mins")
        if processed.type:
            parts.append(processed.type)
        if processed.distance is not None:
            parts.append(f"{format_number(processed.distance)} miles")
        return ", ".join(parts) or "exercise"
    if isinstance(processed, FoodData):
        return processed.description or "meal"
    return "-"
