from __future__ import annotations

from dataclasses import dataclass, field

from .records import VehicleType

"""Config dataclasses for the fleet ingest engine.

IngestConfig carries every default the coercer substitutes, so a parse call is
a pure function of (bytes, format, config). The loader in
fleet_ingest/config/loader.py builds these from YAML; IngestConfig() alone
gives the stock defaults.
"""

ID_STRATEGY_ROW_INDEX = "row_index"
ID_STRATEGY_CONTENT_HASH = "content_hash"
ID_STRATEGIES = (ID_STRATEGY_ROW_INDEX, ID_STRATEGY_CONTENT_HASH)


@dataclass(frozen=True)
class Coordinate:
    """Latitude / longitude pair used as a fallback location."""
    lat: float
    lng: float


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class IngestConfig:
    """Defaults and policies applied while classifying and coercing rows."""
    pickup_fallback: Coordinate = Coordinate(19.0760, 72.8777)
    drop_fallback: Coordinate = Coordinate(19.0896, 72.8656)
    vehicle_types: frozenset[str] = field(default_factory=lambda: frozenset(VehicleType.values()))
    default_vehicle_type: str = VehicleType.BIKE.value
    default_priority: int = 3
    default_service_minutes: int = 5
    default_weight: float = 1.0
    default_capacity: int = 8
    default_shift_start: str = "09:00"
    default_shift_end: str = "18:00"
    unknown_pickup_name: str = "Unknown Pickup"
    unknown_drop_name: str = "Unknown Drop"
    order_id_prefix: str = "ORD-"
    id_strategy: str = ID_STRATEGY_ROW_INDEX
    warn_unclassified: bool = True

    def __post_init__(self) -> None:
        if self.id_strategy not in ID_STRATEGIES:
            raise ValueError(f"unknown id_strategy: {self.id_strategy!r}")
        unknown = set(self.vehicle_types) - set(VehicleType.values())
        if unknown:
            raise ValueError(f"vehicle_types outside the supported set: {sorted(unknown)}")
        if self.default_vehicle_type not in self.vehicle_types:
            raise ValueError(
                f"default_vehicle_type {self.default_vehicle_type!r} is not an allowed vehicle type"
            )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for the CLI."""
    ingest: IngestConfig = field(default_factory=IngestConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
