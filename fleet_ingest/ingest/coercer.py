from __future__ import annotations

import hashlib
import json
import math
from datetime import datetime, time
from typing import Any

from ..models.config_models import ID_STRATEGY_CONTENT_HASH, Coordinate, IngestConfig
from ..models.records import OrderRecord, PartnerRecord, VehicleType
from ..models.row_data import RowData
from ..models.warning_record import ParseWarning
from ..tabular.normalizer import is_empty_cell
from .classifier import PARTNER_NAME_FIELDS

"""Field coercer: turn a classified row into a typed record.

Every rule here is total. A missing or unparsable value is replaced by the
configured default, and the substitutions callers care about (coordinates,
vehicle type) are reported as ParseWarning entries. Unparsable numbers are
handled exactly like missing ones; NaN and infinities never reach a record.
"""

__all__ = [
    "cell_text",
    "parse_float",
    "parse_int",
    "order_external_id",
    "coerce_order",
    "coerce_partner",
]

LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


def cell_text(value: Any) -> str | None:
    """Render a cell as a trimmed string, or None when it is empty.

    Spreadsheet whole numbers come back as floats (101.0) and are rendered
    without the fraction; time cells render as HH:MM.
    """
    if is_empty_cell(value):
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="minutes")
    return str(value).strip()


def parse_float(value: Any) -> float | None:
    """Parse a cell as a finite float; None for missing or unparsable input."""
    if is_empty_cell(value) or isinstance(value, bool):
        return None
    try:
        result = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def parse_int(value: Any) -> int | None:
    """Parse a cell as an int, truncating any fractional part toward zero."""
    result = parse_float(value)
    if result is None:
        return None
    return int(result)


def _first_text(row: RowData, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        text = cell_text(row.get(key))
        if text:
            return text
    return None


def _content_digest(row: RowData) -> str:
    items = sorted((k, cell_text(v)) for k, v in row.values.items())
    payload = json.dumps(items, ensure_ascii=False)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:10]


def order_external_id(row: RowData, config: IngestConfig) -> str:
    """external_id / order_id from the row, else a deterministic fallback ID."""
    explicit = _first_text(row, ("external_id", "order_id"))
    if explicit:
        return explicit
    if config.id_strategy == ID_STRATEGY_CONTENT_HASH:
        return f"{config.order_id_prefix}{_content_digest(row)}"
    return f"{config.order_id_prefix}{row.row_index:03d}"


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def _coordinate_pair(
    row: RowData,
    prefix: str,
    fallback: Coordinate,
    external_id: str,
    warnings: list[ParseWarning],
) -> tuple[float, float]:
    raw_lat = row.get(f"{prefix}_lat")
    raw_lng = row.get(f"{prefix}_lng")
    lat = parse_float(raw_lat)
    lng = parse_float(raw_lng)
    if lat is not None and lng is not None and _in_range(lat, LAT_RANGE) and _in_range(lng, LNG_RANGE):
        return lat, lng

    # 片方だけ有効でも組ごとフォールバックに置き換える
    if is_empty_cell(raw_lat) or is_empty_cell(raw_lng):
        message = f"Missing {prefix} coordinates for {external_id}"
    else:
        message = f"Invalid {prefix} coordinates for {external_id}, using fallback"
    warnings.append(ParseWarning(row_index=row.row_index, message=message))
    return fallback.lat, fallback.lng


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def coerce_order(row: RowData, config: IngestConfig) -> tuple[OrderRecord, list[ParseWarning]]:
    """Build an OrderRecord from a row classified as an order."""
    warnings: list[ParseWarning] = []
    external_id = order_external_id(row, config)
    pickup_lat, pickup_lng = _coordinate_pair(
        row, "pickup", config.pickup_fallback, external_id, warnings
    )
    drop_lat, drop_lng = _coordinate_pair(
        row, "drop", config.drop_fallback, external_id, warnings
    )
    order = OrderRecord(
        external_id=external_id,
        pickup_name=cell_text(row.get("pickup_name")) or config.unknown_pickup_name,
        pickup_lat=pickup_lat,
        pickup_lng=pickup_lng,
        drop_name=cell_text(row.get("drop_name")) or config.unknown_drop_name,
        drop_lat=drop_lat,
        drop_lng=drop_lng,
        priority=_or_default(parse_int(row.get("priority")), config.default_priority),
        service_minutes=_or_default(
            parse_int(row.get("service_minutes")), config.default_service_minutes
        ),
        weight=_or_default(parse_float(row.get("weight")), config.default_weight),
        tw_start=cell_text(row.get("tw_start")),
        tw_end=cell_text(row.get("tw_end")),
    )
    return order, warnings


def _vehicle_type(
    row: RowData, name: str, config: IngestConfig, warnings: list[ParseWarning]
) -> VehicleType:
    default = config.default_vehicle_type
    text = cell_text(row.get("vehicle_type"))
    if text is None:
        warnings.append(
            ParseWarning(
                row_index=row.row_index,
                message=f"No vehicle type for {name}, defaulted to '{default}'",
            )
        )
        return VehicleType(default)
    text = text.lower()
    if text not in config.vehicle_types:
        warnings.append(
            ParseWarning(
                row_index=row.row_index,
                message=f"Invalid vehicle type '{text}' for {name}, defaulted to '{default}'",
            )
        )
        return VehicleType(default)
    return VehicleType(text)


def coerce_partner(row: RowData, config: IngestConfig) -> tuple[PartnerRecord, list[ParseWarning]]:
    """Build a PartnerRecord from a row classified as a partner.

    Raises:
        ValueError: if the row carries none of the partner name fields. The
            classifier never hands such a row over.
    """
    name = _first_text(row, PARTNER_NAME_FIELDS)
    if name is None:
        raise ValueError(f"row {row.row_index} has no partner name field")
    warnings: list[ParseWarning] = []
    partner = PartnerRecord(
        name=name,
        vehicle_type=_vehicle_type(row, name, config, warnings),
        capacity=_or_default(parse_int(row.get("capacity")), config.default_capacity),
        shift_start=cell_text(row.get("shift_start")) or config.default_shift_start,
        shift_end=cell_text(row.get("shift_end")) or config.default_shift_end,
    )
    return partner, warnings
