from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from ..ingest.assembler import assemble
from ..models.config_models import IngestConfig
from ..models.parse_result import ParseResult
from ..tabular.normalizer import normalize_grid
from ..tabular.reader import FileFormat, UnreadableFileError, detect_format, read_grid

"""Ingest service: public entry points for parsing an uploaded file.

Flow: detect_format (extension) -> read bytes -> read_grid -> normalize_grid
-> assemble. The format is checked before any byte is read, so an unsupported
upload never touches its payload. No state survives between calls; concurrent
parses of different uploads need no coordination.
"""

__all__ = [
    "parse_bytes",
    "parse_upload",
    "parse_upload_async",
    "parse_file",
]

logger = logging.getLogger(__name__)

ByteSource = bytes | Callable[[], bytes]


def parse_bytes(data: bytes, fmt: FileFormat, config: IngestConfig | None = None) -> ParseResult:
    """Parse an in-memory buffer already tagged with its format.

    Raises:
        UnreadableFileError: if the buffer cannot be decoded as ``fmt``
    """
    cfg = config if config is not None else IngestConfig()
    grid = read_grid(data, fmt)
    sheet = normalize_grid(grid)
    return assemble(sheet, cfg)


def parse_upload(filename: str, source: ByteSource, config: IngestConfig | None = None) -> ParseResult:
    """Parse an upload given its file name and its bytes (or a byte reader).

    ``source`` may be the bytes themselves or a zero-argument callable that
    returns them; the callable is only invoked once the extension is known to
    be supported.

    Raises:
        UnsupportedFormatError: extension is not .csv / .xlsx / .xls
        UnreadableFileError: bytes could not be read or decoded
    """
    fmt = detect_format(filename)
    if callable(source):
        try:
            data = source()
        except OSError as e:
            raise UnreadableFileError(f"failed reading {filename}: {e}") from e
    else:
        data = source
    logger.debug(f"parsing {filename} as {fmt.value} ({len(data)} bytes)")
    return parse_bytes(data, fmt, config)


async def parse_upload_async(
    filename: str,
    read_bytes: Callable[[], Awaitable[bytes]],
    config: IngestConfig | None = None,
) -> ParseResult:
    """Async variant: awaits ``read_bytes`` once, then parses synchronously."""
    fmt = detect_format(filename)
    try:
        data = await read_bytes()
    except OSError as e:
        raise UnreadableFileError(f"failed reading {filename}: {e}") from e
    logger.debug(f"parsing {filename} as {fmt.value} ({len(data)} bytes)")
    return parse_bytes(data, fmt, config)


def parse_file(path: Path, config: IngestConfig | None = None) -> ParseResult:
    """Parse a file on disk; the file is only opened for a supported extension."""
    return parse_upload(path.name, path.read_bytes, config)
