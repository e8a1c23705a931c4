"""Domain models for recorded coding time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional


DAY_KEY_FMT = "%a %b %d %Y"


@dataclass(slots=True)
class DayRecord:
    """Accumulated coding time for a single calendar day."""

    total_coding_time: int = 0
    last_saved: Optional[datetime] = None


TimeLedger = Dict[str, DayRecord]


def day_key(day: date) -> str:
    """Return the ledger key for ``day``, e.g. ``"Mon Jan 01 2024"``."""
    return day.strftime(DAY_KEY_FMT)


def parse_day_key(key: str) -> Optional[date]:
    try:
        return datetime.strptime(key, DAY_KEY_FMT).date()
    except ValueError:
        return None
