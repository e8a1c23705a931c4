"""Configuration models and helpers for the coding time tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the coding time tracker."""

    tick_interval: timedelta = timedelta(seconds=1)
    idle_timeout: timedelta = timedelta(seconds=10)
    # Saves fire on ticks where the idle gap is a multiple of this.
    save_gap_modulus: int = 60
    watch_interval: timedelta = timedelta(seconds=2)
    status_bar_priority: int = 100
    status_icon: str = "⏱"
    status_tooltip: str = "Click to show coding time"
    show_time_command: str = "code-tracker.showTime"
    show_stats_command: str = "code-tracker.showStats"
    notify_on_save_error: bool = True

    @property
    def idle_timeout_seconds(self) -> float:
        return self.idle_timeout.total_seconds()

    @classmethod
    def from_intervals(
        cls,
        idle_seconds: float,
        watch_seconds: float | None = None,
    ) -> "TrackerSettings":
        watch = watch_seconds if watch_seconds is not None else max(idle_seconds / 5, 1.0)
        return cls(
            idle_timeout=timedelta(seconds=idle_seconds),
            watch_interval=timedelta(seconds=watch),
        )
