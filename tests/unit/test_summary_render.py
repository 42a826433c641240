from __future__ import annotations

import re
from datetime import datetime, timezone

from fleet_ingest.models.run_result import FileStat, RunResult
from fleet_ingest.services.summary import render_file_line, render_summary_line

RUN_PATTERN = re.compile(
    r"^SUMMARY files=([0-9]+) success=([0-9]+) failed=([0-9]+) orders=([0-9]+) "
    r"partners=([0-9]+) warnings=([0-9]+) elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _result(elapsed: float, **kw) -> RunResult:
    start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    base = dict(
        success_files=2,
        failed_files=1,
        total_orders=30,
        total_partners=4,
        total_warnings=7,
        start_time=start,
        end_time=start,
        elapsed_seconds=elapsed,
    )
    base.update(kw)
    return RunResult(**base)


def test_render_summary_line_fields():
    line = render_summary_line(_result(2.0))
    m = RUN_PATTERN.match(line)
    assert m, line
    assert m.groups() == ("3", "2", "1", "30", "4", "7", "2")


def test_render_summary_line_small_elapsed_no_scientific_notation():
    line = render_summary_line(_result(0.000123))
    assert "e-" not in line
    assert line.endswith("elapsed_sec=0.000123")


def test_render_summary_line_zero_elapsed():
    assert render_summary_line(_result(0.0)).endswith("elapsed_sec=0")


def test_render_file_line():
    stat = FileStat("orders.csv", "success", orders=3, partners=2, warnings=1)
    assert render_file_line(stat) == "SUMMARY file=orders.csv status=success orders=3 partners=2 warnings=1"
