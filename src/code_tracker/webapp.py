"""FastAPI application that exposes the tracker to editors over local HTTP."""

from __future__ import annotations

import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .models import DayRecord
from .paths import resolve_data_file
from .reporting import format_duration, sorted_days
from .runner import TrackerRunner, UnknownCommandError

logger = logging.getLogger(__name__)


class ActivityAccepted(BaseModel):
    accepted: bool = True

    model_config = ConfigDict(extra="forbid")


class CommandResult(BaseModel):
    command: str
    message: str

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    data_file: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    watch_paths: Iterable[Path] = (),
    runner: Optional[TrackerRunner] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_settings = settings or TrackerSettings()
    if runner is None:
        runner = TrackerRunner(
            resolve_data_file(data_file),
            resolved_settings,
            watch_paths=watch_paths,
        )
    else:
        resolved_settings = runner.settings

    app = FastAPI(title="Code Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.runner = runner

    @app.on_event("startup")
    async def _startup() -> None:
        runner.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runner.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        active_runner: TrackerRunner = request.app.state.runner
        snapshot = _snapshot(active_runner)
        return {
            "running": active_runner.is_running(),
            "data_file": str(active_runner.data_file),
            "idle_timeout_seconds": resolved_settings.idle_timeout_seconds,
            "today_key": snapshot["today_key"],
            "is_active": snapshot["is_active"],
            "status_text": snapshot["status_text"],
            "live_seconds": snapshot["live_total"],
            "live_formatted": format_duration(snapshot["live_total"]),
        }

    @app.post("/api/activity", status_code=202)
    def activity(request: Request) -> ActivityAccepted:
        request.app.state.runner.record_activity()
        return ActivityAccepted()

    @app.get("/api/time")
    def show_time(request: Request) -> CommandResult:
        return _run_command(request.app.state.runner, resolved_settings.show_time_command)

    @app.get("/api/stats")
    def show_stats(request: Request) -> Dict[str, Any]:
        active_runner: TrackerRunner = request.app.state.runner
        result = _run_command(active_runner, resolved_settings.show_stats_command)
        days = _snapshot(active_runner)["days"]
        return {
            "message": result.message,
            "days": [_day_payload(key, record) for key, record in sorted_days(days)],
        }

    @app.post("/api/commands/{command_id}")
    def run_command(command_id: str, request: Request) -> CommandResult:
        return _run_command(request.app.state.runner, command_id)

    return app


def _run_command(runner: TrackerRunner, command_id: str) -> CommandResult:
    try:
        message = runner.execute_command(command_id)
    except UnknownCommandError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown command: {command_id}") from exc
    if message is None:
        raise HTTPException(status_code=500, detail=f"Command {command_id} failed")
    return CommandResult(command=command_id, message=message)


def _day_payload(key: str, record: DayRecord) -> Dict[str, Any]:
    return {
        "date": key,
        "total_coding_time": record.total_coding_time,
        "formatted": format_duration(record.total_coding_time),
        "last_saved": record.last_saved.isoformat() if record.last_saved else None,
    }


def _snapshot(runner: TrackerRunner) -> Dict[str, Any]:
    try:
        return runner.snapshot()
    except FutureTimeoutError as exc:
        logger.warning("Tracker did not answer a status request in time")
        raise HTTPException(status_code=503, detail="Tracker is busy") from exc
