"""Domain models for the fleet ingest engine.

This package contains the record, warning, result and configuration models
used throughout the pipeline.
"""

from .config_models import AppConfig, Coordinate, DatabaseConfig, IngestConfig
from .parse_result import ParseResult
from .records import OrderRecord, PartnerRecord, VehicleType
from .row_data import RowData
from .warning_record import FILE_LEVEL_ROW, ParseWarning

__all__ = [
    # Configuration models
    "AppConfig",
    "Coordinate",
    "DatabaseConfig",
    "IngestConfig",
    # Pipeline models
    "RowData",
    "OrderRecord",
    "PartnerRecord",
    "VehicleType",
    "ParseWarning",
    "FILE_LEVEL_ROW",
    "ParseResult",
]
