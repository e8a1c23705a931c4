"""JSON file layer for the per-day coding time ledger."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from .models import DayRecord, TimeLedger

logger = logging.getLogger(__name__)


class LedgerStorageError(Exception):
    """Raised when the ledger cannot be written."""


class FileSystem(Protocol):
    def read(self, path: Path) -> str: ...

    def write(self, path: Path, data: str) -> None: ...

    def exists(self, path: Path) -> bool: ...


class LocalFileSystem:
    """UTF-8 text access to the local disk."""

    def read(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write(self, path: Path, data: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")

    def exists(self, path: Path) -> bool:
        return Path(path).exists()


class DayRecordPayload(BaseModel):
    total_coding_time: int = Field(alias="totalCodingTime")
    last_saved: Optional[datetime] = Field(default=None, alias="lastSaved")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("last_saved", mode="wrap")
    @classmethod
    def _unreadable_timestamp_is_missing(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> Optional[datetime]:
        try:
            return handler(value)
        except ValidationError:
            logger.debug("Treating unreadable lastSaved %r as missing", value)
            return None


_LEDGER_ADAPTER = TypeAdapter(Dict[str, DayRecordPayload])
_DOCUMENT_ADAPTER = TypeAdapter(Dict[str, Any])


def parse_ledger(raw: str) -> TimeLedger:
    """Parse the JSON document into a ledger.

    Raises ``ValidationError`` when the document is not a JSON object.
    Records that cannot be read are skipped so the other days survive.
    """
    document = _DOCUMENT_ADAPTER.validate_json(raw)
    ledger: TimeLedger = {}
    for key, value in document.items():
        try:
            record = DayRecordPayload.model_validate(value)
        except ValidationError as exc:
            logger.warning(
                "Skipping unreadable day record %r: %s",
                key,
                exc.errors(include_url=False),
            )
            continue
        ledger[key] = DayRecord(
            total_coding_time=record.total_coding_time,
            last_saved=record.last_saved,
        )
    return ledger


def dump_ledger(ledger: TimeLedger) -> str:
    """Serialize the ledger as pretty-printed JSON with UTC timestamps."""
    payload = {
        key: DayRecordPayload(
            total_coding_time=record.total_coding_time,
            last_saved=_to_utc(record.last_saved),
        )
        for key, record in ledger.items()
    }
    return _LEDGER_ADAPTER.dump_json(payload, indent=2, by_alias=True).decode("utf-8")


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    # Naive timestamps are local wall-clock times.
    return value.astimezone(timezone.utc)


class LedgerStore:
    """Load and overwrite the ledger file through a file-system capability."""

    def __init__(self, path: Path, fs: Optional[FileSystem] = None) -> None:
        self.path = Path(path)
        self.fs: FileSystem = fs or LocalFileSystem()

    def load(self) -> TimeLedger:
        """Return the stored ledger, or an empty one if it is missing or corrupt."""
        try:
            if not self.fs.exists(self.path):
                logger.info("No ledger at %s; starting empty.", self.path)
                return {}
            raw = self.fs.read(self.path)
        except (OSError, UnicodeDecodeError):
            logger.exception("Error loading time data from %s", self.path)
            return {}

        try:
            ledger = parse_ledger(raw)
        except ValidationError as exc:
            logger.warning(
                "Ignoring malformed time data in %s: %s",
                self.path,
                exc.errors(include_url=False)[:3],
            )
            return {}
        logger.debug("Loaded %d day records from %s", len(ledger), self.path)
        return ledger

    def save(self, ledger: TimeLedger) -> None:
        try:
            data = dump_ledger(ledger)
            self.fs.write(self.path, data)
        except (OSError, ValueError, TypeError) as exc:
            raise LedgerStorageError(f"Could not write {self.path}: {exc}") from exc
