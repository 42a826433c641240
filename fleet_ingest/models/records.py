from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Typed record models produced by the ingest pipeline.

OrderRecord / PartnerRecord are the two output streams of a parse. Both are
frozen; every numeric field is always populated (defaults are applied by the
coercer, NaN never reaches a record).
"""

__all__ = [
    "VehicleType",
    "OrderRecord",
    "PartnerRecord",
]


class VehicleType(Enum):
    """Closed set of vehicle types a delivery partner may drive."""
    BIKE = "bike"
    SCOOTER = "scooter"
    CAR = "car"
    VAN = "van"
    TRUCK = "truck"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(m.value for m in cls)


@dataclass(frozen=True)
class OrderRecord:
    """A single delivery order (pickup -> drop)."""
    external_id: str
    pickup_name: str
    pickup_lat: float
    pickup_lng: float
    drop_name: str
    drop_lat: float
    drop_lng: float
    priority: int  # 1-5 想定 (検証なし)
    service_minutes: int
    weight: float
    tw_start: str | None = None  # 任意項目: 無ければ出力から省略
    tw_end: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "external_id": self.external_id,
            "pickup_name": self.pickup_name,
            "pickup_lat": self.pickup_lat,
            "pickup_lng": self.pickup_lng,
            "drop_name": self.drop_name,
            "drop_lat": self.drop_lat,
            "drop_lng": self.drop_lng,
            "priority": self.priority,
            "service_minutes": self.service_minutes,
            "weight": self.weight,
        }
        if self.tw_start is not None:
            data["tw_start"] = self.tw_start
        if self.tw_end is not None:
            data["tw_end"] = self.tw_end
        return data


@dataclass(frozen=True)
class PartnerRecord:
    """A delivery partner (driver) available for dispatch."""
    name: str
    vehicle_type: VehicleType
    capacity: int
    shift_start: str  # "HH:MM"
    shift_end: str  # "HH:MM"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "vehicle_type": self.vehicle_type.value,
            "capacity": self.capacity,
            "shift_start": self.shift_start,
            "shift_end": self.shift_end,
        }
