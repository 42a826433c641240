from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result models for CLI batches (one or more uploads per invocation).

These aggregate per-file outcomes for the SUMMARY output; the parse itself
returns ParseResult and knows nothing about runs or wall-clock time.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file outcome of a CLI run."""
    file_name: str
    status: str  # success/failed
    orders: int = 0
    partners: int = 0
    warnings: int = 0
    elapsed_seconds: float = 0.0
    persisted: bool = False  # DB へ書き込み済みか
    error: str | None = None  # 失敗理由 (fatal のみ)


@dataclass(frozen=True)
class RunResult:
    """Aggregated results and summary output for a CLI run."""
    success_files: int
    failed_files: int
    total_orders: int
    total_partners: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
