from __future__ import annotations

import io
from enum import Enum
from pathlib import PurePath
from typing import Any

import pandas as pd

"""Tabular reader: decode an uploaded file's bytes into a raw grid.

CSV と Excel (.xlsx/.xls) のどちらも pandas で読み込み、同じ形 (行のリスト) の
RawGrid を返す。Excel は先頭シートのみ対象。

Only two conditions are fatal for a whole upload and both are raised from here:
an extension we do not read (UnsupportedFormatError) and bytes that cannot be
decoded in the declared format (UnreadableFileError).
"""

__all__ = [
    "IngestError",
    "UnsupportedFormatError",
    "UnreadableFileError",
    "FileFormat",
    "RawGrid",
    "detect_format",
    "read_grid",
]

RawGrid = list[list[Any]]


class IngestError(Exception):
    """Base class for fatal ingest errors."""


class UnsupportedFormatError(IngestError):
    """Raised when the file extension is not one of .csv / .xlsx / .xls."""


class UnreadableFileError(IngestError):
    """Raised when bytes cannot be decoded in the declared format."""


class FileFormat(Enum):
    CSV = "csv"
    XLSX = "xlsx"
    XLS = "xls"

    @property
    def is_spreadsheet(self) -> bool:
        return self is not FileFormat.CSV


# openpyxl for OOXML, xlrd for legacy BIFF
_EXCEL_ENGINES = {
    FileFormat.XLSX: "openpyxl",
    FileFormat.XLS: "xlrd",
}


def detect_format(filename: str) -> FileFormat:
    """Infer the format tag from a file name's extension (case-insensitive)."""
    suffix = PurePath(filename).suffix.lower().lstrip(".")
    try:
        return FileFormat(suffix)
    except ValueError:
        raise UnsupportedFormatError(
            f"unsupported file format: {filename!r} (expected .csv, .xlsx or .xls)"
        ) from None


def read_grid(data: bytes, fmt: FileFormat) -> RawGrid:
    """Decode ``data`` as ``fmt`` and return its cells row by row.

    Parameters
    ----------
    data: アップロードされたファイルの生バイト列
    fmt: 宣言されたフォーマット (拡張子から detect_format で決定)

    Cells keep pandas' raw scalar values (str / int / float / datetime, NaN for
    empty spreadsheet cells). An empty file yields an empty grid; deciding that
    it has no data is left to the normalizer.
    """
    if fmt.is_spreadsheet:
        df = _read_spreadsheet(data, fmt)
    else:
        df = _read_csv(data)
    return df.to_numpy(dtype=object).tolist()


def _read_spreadsheet(data: bytes, fmt: FileFormat) -> pd.DataFrame:
    try:
        # sheet_name=0: 先頭シートのみ (2枚目以降は無視)
        return pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            dtype=object,
            engine=_EXCEL_ENGINES[fmt],
        )
    except Exception as e:
        raise UnreadableFileError(f"could not read {fmt.value} workbook: {e}") from e


def _read_csv(data: bytes) -> pd.DataFrame:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnreadableFileError(f"could not decode csv as UTF-8: {e}") from e
    # 旧 Mac 形式 (CR のみ) の改行も LF に揃える
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if not text.strip():
        return pd.DataFrame()

    # C エンジン: フィールド長の上限なし。閉じていない引用符は ParserError
    read_opts: dict[str, Any] = {
        "header": None,
        "dtype": str,
        "keep_default_na": False,
        "skip_blank_lines": True,
        "engine": "c",
    }
    try:
        width = pd.read_csv(io.StringIO(text), nrows=1, **read_opts).shape[1]
        # usecols を指定するとヘッダより長い行もエラーにならず、余分なセルは捨てられる
        return pd.read_csv(io.StringIO(text), usecols=range(width), **read_opts)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, ValueError) as e:
        raise UnreadableFileError(f"could not tokenize csv: {e}") from e
