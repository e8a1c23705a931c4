"""Serve the tracker's HTTP API with uvicorn."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import uvicorn

from .config import TrackerSettings
from .paths import resolve_data_file
from .webapp import create_app

logger = logging.getLogger(__name__)


def activity_url(host: str, port: int) -> str:
    """Address editor plugins should POST activity signals to."""
    return f"http://{host}:{port}/api/activity"


def serve_api(
    *,
    host: str = "127.0.0.1",
    port: int = 8766,
    data_file: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    watch_paths: Iterable[Path] = (),
    log_level: str = "info",
) -> None:
    """Block serving the tracker until uvicorn shuts down."""
    app = create_app(
        data_file=resolve_data_file(data_file),
        settings=settings or TrackerSettings(),
        watch_paths=watch_paths,
    )
    logger.info("Report editor activity to %s", activity_url(host, port))
    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)
