"""PDF health report rendering."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from hb_cli.core.constants import CATEGORY_LABELS
from hb_cli.core.models import HealthLogEntry
from hb_cli.core.summary import build_weekly_summary
from hb_cli.utils.formatting import (
    format_date_range,
    format_entry_details,
    format_minutes,
    format_timestamp,
)

_CATEGORY_COLORS = {
    "exercise": (29, 78, 216),
    "food": (21, 128, 61),
}
_MUTED = (107, 114, 128)
_TEXT = (17, 17, 17)


class ReportError(RuntimeError):
    """Raised when a report cannot be written."""


@dataclass(frozen=True)
class ReportOptions:
    start_date: date
    end_date: date
    include_raw_messages: bool = True


def _pdf_text(value: str) -> str:
    # Core PDF fonts only cover latin-1.
    return value.encode("latin-1", "replace").decode("latin-1")


def _line(pdf: FPDF, text: str, height: float = 6, style: str = "", size: int = 10,
          color: Tuple[int, int, int] = _TEXT) -> None:
    pdf.set_font("Helvetica", style, size)
    pdf.set_text_color(*color)
    pdf.multi_cell(0, height, _pdf_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_report(entries: Iterable[HealthLogEntry], options: ReportOptions) -> FPDF:
    """Lay out the summary block and the entry list for the date range."""
    summary = build_weekly_summary(entries, options.start_date, options.end_date)

    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 20)
    pdf.set_text_color(*_TEXT)
    pdf.cell(0, 12, "Health Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")
    _line(pdf, format_date_range(options.start_date, options.end_date, long=True), color=_MUTED)
    pdf.ln(4)

    _line(pdf, "Summary", height=8, style="B", size=14)
    _line(pdf, f"Exercise sessions: {summary.exercise_count}")
    _line(pdf, f"Average duration: {format_minutes(summary.average_exercise_duration)}")
    _line(pdf, f"Food logs: {summary.food_log_count}")

    if summary.exercise_types:
        pdf.ln(2)
        _line(pdf, "Exercise Types", height=8, style="B", size=12)
        for exercise_type, count in summary.exercise_types.items():
            _line(pdf, f"- {exercise_type}: {count}")

    pdf.ln(4)
    _line(pdf, "Health Logs", height=8, style="B", size=14)
    if not summary.entries:
        _line(pdf, "No health logs in this period.", color=_MUTED)

    for entry in summary.entries:
        label = CATEGORY_LABELS.get(entry.category, entry.category.title())
        color = _CATEGORY_COLORS.get(entry.category, _TEXT)
        _line(pdf, f"{label}  |  {format_timestamp(entry.timestamp)}", style="B", color=color)
        _line(pdf, format_entry_details(entry))
        if options.include_raw_messages:
            _line(pdf, f'"{entry.raw_message}"', style="I", size=9, color=_MUTED)
        pdf.ln(2)

    return pdf


def write_pdf_report(path: Path, entries: Iterable[HealthLogEntry], options: ReportOptions) -> Path:
    """Render the report to ``path`` and return it."""
    try:
        pdf = render_report(entries, options)
        path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(path))
    except (OSError, FPDFException) as exc:
        raise ReportError(f"Failed to write PDF report {path}: {exc}") from exc
    return path
