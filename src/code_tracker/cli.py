"""Command-line interface for the coding time tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import TrackerSettings
from .host import ConsoleNotifier, ConsoleStatusBar, StatusBarItem
from .paths import get_log_path, resolve_data_file
from .storage import LedgerStore
from .tracker import CodingTimeTracker

app = typer.Typer(help="Track active coding time per day.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

DATA_FILE_OPTION = typer.Option(
    None,
    "--data-file",
    path_type=Path,
    help="Location of the coding time JSON ledger.",
)


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
) -> None:
    ctx.obj = {"log_level": logging.DEBUG if verbose else logging.INFO}
    logging.basicConfig(level=ctx.obj["log_level"], format=LOG_FORMAT)


def _log_to_file(log_file: Path, level: int) -> None:
    """Route logging away from the terminal, which shows the status line."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


@app.command()
def track(
    ctx: typer.Context,
    data_file: Optional[Path] = DATA_FILE_OPTION,
    idle_seconds: float = typer.Option(
        10.0,
        "--idle-timeout",
        min=1.0,
        help="Seconds without activity before the session counts as idle.",
    ),
    watch: Optional[List[Path]] = typer.Option(
        None,
        "--watch",
        path_type=Path,
        help="Directory whose file edits count as activity (repeatable). Defaults to the current directory.",
    ),
    watch_seconds: Optional[float] = typer.Option(
        None,
        "--watch-interval",
        min=0.5,
        help="Seconds between workspace scans.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        path_type=Path,
        help="Where to write logs while the status line is shown.",
    ),
) -> None:
    """Show a live status line and count edits in the workspace as activity."""
    from .runner import TrackerRunner

    level = (ctx.obj or {}).get("log_level", logging.INFO)
    _log_to_file(log_file or get_log_path(), level)
    settings = TrackerSettings.from_intervals(
        idle_seconds=idle_seconds, watch_seconds=watch_seconds
    )
    runner = TrackerRunner(
        resolve_data_file(data_file),
        settings,
        status_bar=ConsoleStatusBar(),
        notifier=ConsoleNotifier(),
        watch_paths=watch or [Path.cwd()],
    )
    runner.run_forever()


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the HTTP API."),
    port: int = typer.Option(
        8766, "--port", min=1, max=65535, help="TCP port for the HTTP API."
    ),
    data_file: Optional[Path] = DATA_FILE_OPTION,
    idle_seconds: float = typer.Option(
        10.0,
        "--idle-timeout",
        min=1.0,
        help="Seconds without activity before the session counts as idle.",
    ),
    watch: Optional[List[Path]] = typer.Option(
        None,
        "--watch",
        path_type=Path,
        help="Also count file edits under this directory as activity (repeatable).",
    ),
) -> None:
    """Serve the tracker over local HTTP so editor plugins can report activity."""
    from .server_runner import serve_api

    serve_api(
        host=host,
        port=port,
        data_file=resolve_data_file(data_file),
        settings=TrackerSettings.from_intervals(idle_seconds=idle_seconds),
        watch_paths=watch or [],
    )


def _read_only_tracker(data_file: Optional[Path]) -> CodingTimeTracker:
    return CodingTimeTracker(
        store=LedgerStore(resolve_data_file(data_file)),
        status_bar=StatusBarItem(),
        notifier=ConsoleNotifier(),
    )


@app.command("time")
def show_time(data_file: Optional[Path] = DATA_FILE_OPTION) -> None:
    """Print today's saved coding time."""
    _read_only_tracker(data_file).show_time()


@app.command("stats")
def show_stats(data_file: Optional[Path] = DATA_FILE_OPTION) -> None:
    """Print coding time for every recorded day, newest first."""
    _read_only_tracker(data_file).show_stats()
