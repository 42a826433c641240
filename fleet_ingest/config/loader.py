from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, Coordinate, DatabaseConfig, IngestConfig

"""Config loader.

Responsibilities:
- Load YAML config (config/ingest.yml by default)
- Validate against ingest_schema.json (additionalProperties: false throughout)
- Apply defaults: every key is optional, absent keys keep IngestConfig defaults
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "build_config",
]

DEFAULT_CONFIG_PATH = Path("config/ingest.yml")
SCHEMA_PATH = Path(__file__).parent / "ingest_schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the config data
            fails validation (unknown keys, wrong types, out-of-range values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _coordinate(raw: dict[str, Any] | None, default: Coordinate) -> Coordinate:
    if raw is None:
        return default
    return Coordinate(lat=float(raw["lat"]), lng=float(raw["lng"]))


def _build_ingest(raw: dict[str, Any]) -> IngestConfig:
    defaults = IngestConfig()
    # 座標・車種以外はキー名がそのままフィールド名
    scalar_keys = [
        "default_vehicle_type",
        "default_priority",
        "default_service_minutes",
        "default_weight",
        "default_capacity",
        "default_shift_start",
        "default_shift_end",
        "unknown_pickup_name",
        "unknown_drop_name",
        "order_id_prefix",
        "id_strategy",
        "warn_unclassified",
    ]
    overrides: dict[str, Any] = {k: raw[k] for k in scalar_keys if k in raw}
    if "default_weight" in overrides:
        overrides["default_weight"] = float(overrides["default_weight"])
    if "vehicle_types" in raw:
        overrides["vehicle_types"] = frozenset(raw["vehicle_types"])
    try:
        return IngestConfig(
            pickup_fallback=_coordinate(raw.get("pickup_fallback"), defaults.pickup_fallback),
            drop_fallback=_coordinate(raw.get("drop_fallback"), defaults.drop_fallback),
            **overrides,
        )
    except ValueError as e:
        raise ConfigError(f"config validation failed: {e}") from e


def build_config(data: dict[str, Any]) -> AppConfig:
    """Validate an already-parsed mapping and build AppConfig from it."""
    _validate_config_schema(data)
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return AppConfig(ingest=_build_ingest(data.get("ingest") or {}), database=db)


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return build_config(data)
