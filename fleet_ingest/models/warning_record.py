from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""ParseWarning model for per-row parse defects.

Supports row=-1 as a sentinel for file-level conditions (e.g. an empty upload)
where no specific data row applies.
"""

__all__ = [
    "FILE_LEVEL_ROW",
    "ParseWarning",
]

FILE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ParseWarning:
    """A soft failure recorded while parsing an upload.

    Attributes:
        row_index: Data row number (1-based, header row excluded).
            Use -1 for file-level warnings.
        message: Human-readable description of what was defaulted or skipped.
    """
    row_index: int
    message: str

    @staticmethod
    def file_level(message: str) -> ParseWarning:
        return ParseWarning(row_index=FILE_LEVEL_ROW, message=message)

    @property
    def is_file_level(self) -> bool:
        return self.row_index == FILE_LEVEL_ROW

    def __str__(self) -> str:
        if self.is_file_level:
            return self.message
        return f"Row {self.row_index}: {self.message}"

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
