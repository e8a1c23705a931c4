from __future__ import annotations

from datetime import date, datetime

import pytest

from code_tracker.models import DayRecord, day_key, parse_day_key
from code_tracker.reporting import (
    format_day_line,
    format_duration,
    render_stats,
    render_today,
    sorted_days,
)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3661, "01:01:01"),
        (90000, "25:00:00"),
        (59.9, "00:00:59"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_day_key_matches_date_string_format():
    assert day_key(date(2024, 1, 1)) == "Mon Jan 01 2024"
    assert parse_day_key("Mon Jan 01 2024") == date(2024, 1, 1)
    assert parse_day_key("Day1") is None


def test_day_line_with_last_saved():
    saved = datetime(2024, 1, 1, 8, 30, 0).astimezone()

    line = format_day_line("Day1", DayRecord(total_coding_time=3661, last_saved=saved))

    assert line == "Day1: 01:01:01 (Last saved: 08:30:00)"


def test_day_line_without_last_saved():
    assert format_day_line("Day1", DayRecord(total_coding_time=5)) == "Day1: 00:00:05 (Last saved: N/A)"


def test_days_sorted_newest_first_regardless_of_insertion_order():
    ledger = {
        "Tue Jan 02 2024": DayRecord(total_coding_time=2),
        "Fri Dec 29 2023": DayRecord(total_coding_time=1),
        "Wed Jan 10 2024": DayRecord(total_coding_time=3),
    }

    keys = [key for key, _ in sorted_days(ledger)]

    assert keys == ["Wed Jan 10 2024", "Tue Jan 02 2024", "Fri Dec 29 2023"]


def test_unparseable_keys_sort_last():
    ledger = {"Day1": DayRecord(), "Mon Jan 01 2024": DayRecord()}

    assert [key for key, _ in sorted_days(ledger)] == ["Mon Jan 01 2024", "Day1"]


def test_render_stats_and_today():
    assert render_stats({}) == "Coding Stats:\n"
    assert render_stats({"Day1": DayRecord(total_coding_time=61)}) == (
        "Coding Stats:\nDay1: 00:01:01 (Last saved: N/A)"
    )
    assert render_today(7200) == "Today's coding time: 02:00:00"
