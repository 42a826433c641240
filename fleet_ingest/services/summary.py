from __future__ import annotations

from ..models.run_result import FileStat, RunResult

"""SUMMARY line rendering for CLI runs.

Two line shapes, both starting with "SUMMARY " once logged:
    file=<name> status=<success|failed> orders=<n> partners=<n> warnings=<n>
    files=<n> success=<n> failed=<n> orders=<n> partners=<n> warnings=<n> elapsed_sec=<s>
"""


def _format_seconds(seconds: float) -> str:
    # Handle very small numbers and integer values appropriately
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_file_line(stat: FileStat) -> str:
    """Render the per-file SUMMARY line.

    Examples:
        >>> render_file_line(FileStat("orders.csv", "success", orders=3, partners=2))
        'SUMMARY file=orders.csv status=success orders=3 partners=2 warnings=0'
    """
    return (
        f"SUMMARY file={stat.file_name} "
        f"status={stat.status} "
        f"orders={stat.orders} "
        f"partners={stat.partners} "
        f"warnings={stat.warnings}"
    )


def render_summary_line(result: RunResult) -> str:
    """Render the run-level SUMMARY line from a RunResult."""
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"orders={result.total_orders} "
        f"partners={result.total_partners} "
        f"warnings={result.total_warnings} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
