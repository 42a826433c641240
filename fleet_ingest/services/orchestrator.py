from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.batch_insert import BatchInsertError
from ..logging.warning_log import WarningLogBuffer
from ..models.config_models import IngestConfig
from ..models.parse_result import ParseResult
from ..models.run_result import FileStat, RunResult
from ..tabular.reader import IngestError
from .ingest import parse_file
from .persistence import build_job_seed, insert_job, persist_result
from .progress import ProgressTracker

"""Batch orchestration for CLI runs.

Parses each file independently, logs its warnings, optionally persists the
records inside a per-file transaction, and aggregates a RunResult. A fatal
error on one file (unsupported / unreadable / insert failure) marks only that
file as failed; the remaining files are still processed.
"""

__all__ = [
    "process_files",
]

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Path, ParseResult], None]


def _persist_file(
    cursor: Any, path: Path, result: ParseResult, org_id: str, job_name: str | None
) -> None:
    """Write one file's records in its own transaction (rollback on failure)."""
    cursor.execute("BEGIN")
    try:
        persist_result(cursor, result, org_id)
        if job_name:
            job_id = insert_job(cursor, build_job_seed(result, org_id, f"{job_name} ({path.name})"))
            logger.info(f"{path.name}: created job {job_id}")
        cursor.execute("COMMIT")
    except Exception:
        cursor.execute("ROLLBACK")
        raise


def process_files(
    paths: Sequence[Path],
    config: IngestConfig,
    *,
    cursor: Any = None,
    org_id: str | None = None,
    job_name: str | None = None,
    warning_log: WarningLogBuffer | None = None,
    on_result: ResultCallback | None = None,
) -> RunResult:
    """Parse every file in ``paths`` and aggregate the outcome.

    Args:
        paths: Upload files to parse, processed in the given order
        config: Ingest defaults passed through to every parse
        cursor: Database cursor; None means parse only (no persistence)
        org_id: Organization the records belong to (required with a cursor)
        job_name: When set (and persisting), seed one job per file
        warning_log: Buffer that collects every warning for the JSON Lines log
        on_result: Called with each successful ParseResult (e.g. JSON output)
    """
    if cursor is not None and not org_id:
        raise ValueError("org_id is required when persisting")

    start_time = datetime.now(UTC)
    file_stats: list[FileStat] = []

    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                result = parse_file(path, config)
            except IngestError as e:
                logger.error(f"{path.name}: {e}")
                file_stats.append(FileStat(file_name=path.name, status="failed", error=str(e)))
                progress.finish_file()
                continue

            for w in result.warnings:
                logger.warning(f"{path.name}: {w}")
            if warning_log is not None:
                warning_log.extend(path.name, result.warnings)

            persisted = False
            error: str | None = None
            if cursor is not None:
                try:
                    _persist_file(cursor, path, result, org_id or "", job_name)
                    persisted = True
                except BatchInsertError as e:
                    logger.error(f"{path.name}: {e}")
                    error = str(e)

            if on_result is not None and error is None:
                on_result(path, result)

            elapsed = (datetime.now(UTC) - file_start).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status="failed" if error else "success",
                    orders=len(result.orders),
                    partners=len(result.partners),
                    warnings=len(result.warnings),
                    elapsed_seconds=elapsed,
                    persisted=persisted,
                    error=error,
                )
            )
            progress.finish_file(orders=len(result.orders), partners=len(result.partners))

    end_time = datetime.now(UTC)
    succeeded = [s for s in file_stats if s.status == "success"]
    return RunResult(
        success_files=len(succeeded),
        failed_files=len(file_stats) - len(succeeded),
        total_orders=sum(s.orders for s in succeeded),
        total_partners=sum(s.partners for s in succeeded),
        total_warnings=sum(s.warnings for s in succeeded),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
