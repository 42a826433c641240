from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..models.warning_record import ParseWarning

"""Warning log buffering for CLI runs.

- JSON Lines with a fixed schema {timestamp, file, row, message}; no extra keys
- One `logs/warnings-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Buffered in memory, flushed once per run (serial execution, no locking)

The parse path itself never touches this module; it only returns
ParseWarning values. Timestamps are attached here, at logging time.
"""

__all__ = [
    "WarningLogEntry",
    "WarningLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


@dataclass(frozen=True)
class WarningLogEntry:
    timestamp: str  # ISO8601 UTC, 'Z' suffix
    file: str
    row: int  # ファイル単位の警告は -1
    message: str

    @staticmethod
    def create(file: str, warning: ParseWarning) -> WarningLogEntry:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return WarningLogEntry(timestamp=ts, file=file, row=warning.row_index, message=warning.message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


class WarningLogBuffer:
    """In-memory buffer of warning entries. flush() appends JSON Lines."""

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._entries: list[WarningLogEntry] = []
        self._logs_dir = logs_dir
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"warnings-{stamp}.log"
        return self._file_path

    def extend(self, file: str, warnings: tuple[ParseWarning, ...] | list[ParseWarning]) -> None:
        for w in warnings:
            self._entries.append(WarningLogEntry.create(file, w))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._entries)

    def flush(self) -> Path | None:
        """Write buffered entries; returns the log path, or None if nothing was buffered."""
        if not self._entries:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for entry in self._entries:
                f.write(entry.to_json_line() + "\n")
        self._entries.clear()
        return fp
