from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

"""File-level progress bar for CLI runs (tqdm, TTY only).

パイプや CI など TTY でない出力先では tqdm を生成しない
(制御シーケンスがログ行に混ざるのを避けるため)。
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar over the files of a run, with running order / partner totals."""

    def __init__(self, total_files: int, *, description: str = "Parsing files") -> None:
        self.description = description
        self.files_done = 0
        self.orders = 0
        self.partners = 0
        self.pbar: Any = None
        if is_tty_enabled():
            self.pbar = tqdm(total=total_files, desc=description, unit="file", dynamic_ncols=True)

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_file(self, file_path: Path) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, *, orders: int = 0, partners: int = 0) -> None:
        self.files_done += 1
        self.orders += orders
        self.partners += partners
        if self.pbar is not None:
            self.pbar.set_postfix(orders=self.orders, partners=self.partners)
            self.pbar.set_description(self.description)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
