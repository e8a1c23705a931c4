"""Rendering helpers for status text and coding time summaries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from .models import DayRecord, TimeLedger, parse_day_key


def format_duration(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS``; hours do not wrap at 24."""
    total_seconds = max(int(seconds), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_last_saved(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.astimezone().strftime("%H:%M:%S")


def sorted_days(ledger: TimeLedger) -> list[tuple[str, DayRecord]]:
    """Return ledger entries, most recent day first.

    Keys that are not valid day-keys go last, in reverse string order.
    """

    def sort_key(item: tuple[str, DayRecord]) -> tuple[bool, date, str]:
        parsed = parse_day_key(item[0])
        return (parsed is not None, parsed or date.min, item[0])

    return sorted(ledger.items(), key=sort_key, reverse=True)


def format_day_line(key: str, record: DayRecord) -> str:
    return (
        f"{key}: {format_duration(record.total_coding_time)} "
        f"(Last saved: {format_last_saved(record.last_saved)})"
    )


def render_stats(ledger: TimeLedger) -> str:
    lines: Iterable[str] = (format_day_line(key, record) for key, record in sorted_days(ledger))
    return "Coding Stats:\n" + "\n".join(lines)


def render_today(seconds: int) -> str:
    return f"Today's coding time: {format_duration(seconds)}"
