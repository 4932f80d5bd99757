"""Date range parsing and timestamp helpers."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple

import typer

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(value: Optional[str]) -> Optional[str]:
    """Typer callback that validates YYYY-MM-DD format for date options."""
    if value is None:
        return value
    if not _DATE_RE.match(value):
        raise typer.BadParameter(
            f"Invalid date '{value}'. Expected format: YYYY-MM-DD (e.g. 2026-01-15)"
        )
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise typer.BadParameter(
            f"Invalid date '{value}'. Expected format: YYYY-MM-DD (e.g. 2026-01-15)"
        )
    return value


def parse_date(value: str) -> date:
    """Parse YYYY-MM-DD date string."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp (or epoch milliseconds) into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_date_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    last_days: Optional[int] = None,
    last_weeks: Optional[int] = None,
    this_week: bool = False,
    last_week: bool = False,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """Resolve CLI date flags into concrete start/end dates."""
    now = today or date.today()

    if start_date and end_date:
        return parse_date(start_date), parse_date(end_date)
    if start_date and not end_date:
        return parse_date(start_date), now
    if end_date and not start_date:
        end = parse_date(end_date)
        return end - timedelta(days=6), end

    if last_days:
        return now - timedelta(days=max(last_days - 1, 0)), now
    if last_weeks:
        days = max(last_weeks * 7 - 1, 0)
        return now - timedelta(days=days), now

    if this_week:
        start = now - timedelta(days=now.weekday())
        return start, start + timedelta(days=6)

    if last_week:
        this_week_start = now - timedelta(days=now.weekday())
        start = this_week_start - timedelta(days=7)
        return start, start + timedelta(days=6)

    # Default: last 7 days.
    return now - timedelta(days=6), now


def in_date_range(moment: datetime, start: date, end: date) -> bool:
    """Whether a timestamp falls on a local calendar day inside start..end."""
    day = moment.astimezone().date()
    return start <= day <= end
