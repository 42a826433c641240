from __future__ import annotations

import math
from datetime import time

import pytest

from fleet_ingest.ingest.coercer import (
    cell_text,
    coerce_order,
    coerce_partner,
    order_external_id,
    parse_float,
    parse_int,
)
from fleet_ingest.models.config_models import Coordinate, IngestConfig
from fleet_ingest.models.records import VehicleType
from fleet_ingest.models.row_data import RowData

CONFIG = IngestConfig()


def _row(row_index: int = 1, **values) -> RowData:
    return RowData(row_index=row_index, values=values)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("19.07", 19.07),
        (" 72.5 ", 72.5),
        (3, 3.0),
        (2.5, 2.5),
        ("-0.5", -0.5),
        ("abc", None),
        ("12abc", None),
        ("", None),
        (None, None),
        (math.nan, None),
        ("nan", None),
        ("inf", None),
        (True, None),
    ],
)
def test_parse_float(value, expected):
    assert parse_float(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [("3", 3), ("3.7", 3), ("-2.9", -2), (4.0, 4), ("x", None), (None, None)],
)
def test_parse_int(value, expected):
    assert parse_int(value) == expected


def test_cell_text():
    assert cell_text(101.0) == "101"
    assert cell_text(1.5) == "1.5"
    assert cell_text(" ORD-9 ") == "ORD-9"
    assert cell_text(time(9, 30)) == "09:30"
    assert cell_text(None) is None
    assert cell_text(math.nan) is None


def test_external_id_prefers_external_id_then_order_id():
    assert order_external_id(_row(external_id="E1", order_id="O1"), CONFIG) == "E1"
    assert order_external_id(_row(order_id=55.0), CONFIG) == "55"


def test_external_id_fallback_is_zero_padded_row_index():
    assert order_external_id(_row(row_index=7, pickup_name="A"), CONFIG) == "ORD-007"
    assert order_external_id(_row(row_index=1234, pickup_name="A"), CONFIG) == "ORD-1234"


def test_external_id_content_hash_strategy_is_deterministic():
    cfg = IngestConfig(id_strategy="content_hash")
    a = order_external_id(_row(row_index=1, pickup_name="A", drop_name="B"), cfg)
    b = order_external_id(_row(row_index=99, drop_name="B", pickup_name="A"), cfg)
    c = order_external_id(_row(row_index=1, pickup_name="A", drop_name="C"), cfg)
    assert a == b
    assert a != c
    assert a.startswith("ORD-") and len(a) == len("ORD-") + 10


def test_full_order_row():
    order, warnings = coerce_order(
        _row(
            external_id="A-1",
            pickup_name="Restaurant A",
            pickup_lat="19.0825",
            pickup_lng="72.8751",
            drop_name="Customer 2",
            drop_lat="19.0945",
            drop_lng="72.8712",
            priority="1",
            service_minutes="3",
            weight="0.8",
            tw_start="10:00",
            tw_end="11:30",
        ),
        CONFIG,
    )
    assert warnings == []
    assert order.external_id == "A-1"
    assert (order.pickup_lat, order.pickup_lng) == (19.0825, 72.8751)
    assert (order.drop_lat, order.drop_lng) == (19.0945, 72.8712)
    assert order.priority == 1
    assert order.service_minutes == 3
    assert order.weight == 0.8
    assert (order.tw_start, order.tw_end) == ("10:00", "11:30")


def test_order_defaults_and_missing_coordinate_warnings():
    order, warnings = coerce_order(_row(row_index=2, pickup_name="X", drop_name="Y"), CONFIG)
    assert order.external_id == "ORD-002"
    assert (order.pickup_lat, order.pickup_lng) == (19.0760, 72.8777)
    assert (order.drop_lat, order.drop_lng) == (19.0896, 72.8656)
    assert order.priority == 3
    assert order.service_minutes == 5
    assert order.weight == 1.0
    assert order.tw_start is None and order.tw_end is None
    assert [w.row_index for w in warnings] == [2, 2]
    assert warnings[0].message == "Missing pickup coordinates for ORD-002"
    assert warnings[1].message == "Missing drop coordinates for ORD-002"


def test_order_placeholder_stop_names():
    order, _ = coerce_order(_row(pickup_name="Only pickup"), CONFIG)
    assert order.drop_name == "Unknown Drop"
    order, _ = coerce_order(_row(drop_name="Only drop"), CONFIG)
    assert order.pickup_name == "Unknown Pickup"


def test_unparsable_numbers_fall_back_to_defaults_without_warning():
    order, warnings = coerce_order(
        _row(
            external_id="E",
            pickup_name="A",
            pickup_lat="1",
            pickup_lng="2",
            drop_name="B",
            drop_lat="3",
            drop_lng="4",
            priority="high",
            service_minutes="n/a",
            weight="heavy",
        ),
        CONFIG,
    )
    assert warnings == []
    assert order.priority == 3
    assert order.service_minutes == 5
    assert order.weight == 1.0


def test_unparsable_coordinate_uses_fallback_pair_and_warns():
    order, warnings = coerce_order(
        _row(external_id="E9", pickup_name="A", pickup_lat="north", pickup_lng="72.9",
             drop_name="B", drop_lat="19.1", drop_lng="72.8"),
        CONFIG,
    )
    # pair is replaced as a whole, never half real / half fallback
    assert (order.pickup_lat, order.pickup_lng) == (19.0760, 72.8777)
    assert (order.drop_lat, order.drop_lng) == (19.1, 72.8)
    assert len(warnings) == 1
    assert warnings[0].message == "Invalid pickup coordinates for E9, using fallback"


def test_out_of_range_coordinate_is_invalid():
    order, warnings = coerce_order(
        _row(external_id="E", pickup_name="A", pickup_lat="95", pickup_lng="10",
             drop_name="B", drop_lat="10", drop_lng="-190"),
        CONFIG,
    )
    assert (order.pickup_lat, order.pickup_lng) == (19.0760, 72.8777)
    assert (order.drop_lat, order.drop_lng) == (19.0896, 72.8656)
    assert len(warnings) == 2


def test_half_missing_pair_counts_as_missing():
    _, warnings = coerce_order(
        _row(external_id="E", pickup_name="A", pickup_lat="19.0",
             drop_name="B", drop_lat="19.1", drop_lng="72.8"),
        CONFIG,
    )
    assert [w.message for w in warnings] == ["Missing pickup coordinates for E"]


def test_zero_is_a_valid_value():
    order, warnings = coerce_order(
        _row(external_id="E", pickup_name="A", pickup_lat=0, pickup_lng=0,
             drop_name="B", drop_lat=0.0, drop_lng="0", weight="0", priority="0"),
        CONFIG,
    )
    assert warnings == []
    assert (order.pickup_lat, order.pickup_lng, order.drop_lat, order.drop_lng) == (0.0, 0.0, 0.0, 0.0)
    assert order.weight == 0.0
    assert order.priority == 0


def test_configured_fallback_coordinates():
    cfg = IngestConfig(pickup_fallback=Coordinate(1.0, 2.0), drop_fallback=Coordinate(3.0, 4.0))
    order, _ = coerce_order(_row(pickup_name="A"), cfg)
    assert (order.pickup_lat, order.pickup_lng, order.drop_lat, order.drop_lng) == (1.0, 2.0, 3.0, 4.0)


def test_numeric_fields_never_nan():
    order, _ = coerce_order(
        _row(pickup_name="A", pickup_lat=math.nan, weight=math.nan, priority=math.nan), CONFIG
    )
    for value in (order.pickup_lat, order.pickup_lng, order.drop_lat, order.drop_lng, order.weight):
        assert not math.isnan(value)


def test_full_partner_row():
    partner, warnings = coerce_partner(
        _row(name="Priya", vehicle_type="Scooter", capacity="12", shift_start="10:00", shift_end="19:00"),
        CONFIG,
    )
    assert warnings == []
    assert partner.name == "Priya"
    assert partner.vehicle_type is VehicleType.SCOOTER
    assert partner.capacity == 12
    assert (partner.shift_start, partner.shift_end) == ("10:00", "19:00")


def test_partner_name_priority():
    partner, _ = coerce_partner(
        _row(partner_name="P", driver_name="D", vehicle_type="car"), CONFIG
    )
    assert partner.name == "P"
    partner, _ = coerce_partner(_row(driver_name="D", vehicle_type="car"), CONFIG)
    assert partner.name == "D"


def test_invalid_vehicle_type_defaults_to_bike_with_warning():
    partner, warnings = coerce_partner(_row(row_index=4, name="Bob", vehicle_type="scooter-xl"), CONFIG)
    assert partner.vehicle_type is VehicleType.BIKE
    assert len(warnings) == 1
    assert warnings[0].row_index == 4
    assert "Bob" in warnings[0].message
    assert warnings[0].message == "Invalid vehicle type 'scooter-xl' for Bob, defaulted to 'bike'"


def test_absent_vehicle_type_warning_has_different_wording():
    partner, warnings = coerce_partner(_row(name="Bob"), CONFIG)
    assert partner.vehicle_type is VehicleType.BIKE
    assert warnings[0].message == "No vehicle type for Bob, defaulted to 'bike'"


def test_restricted_vehicle_whitelist():
    cfg = IngestConfig(vehicle_types=frozenset({"van", "truck"}), default_vehicle_type="van")
    partner, warnings = coerce_partner(_row(name="Bob", vehicle_type="bike"), cfg)
    assert partner.vehicle_type is VehicleType.VAN
    assert len(warnings) == 1


def test_partner_defaults():
    partner, _ = coerce_partner(_row(name="Bob", vehicle_type="van", capacity="lots"), CONFIG)
    assert partner.capacity == 8
    assert (partner.shift_start, partner.shift_end) == ("09:00", "18:00")


def test_partner_time_cells_from_spreadsheet():
    partner, _ = coerce_partner(
        _row(name="Bob", vehicle_type="van", shift_start=time(7, 0), shift_end=time(15, 30)), CONFIG
    )
    assert (partner.shift_start, partner.shift_end) == ("07:00", "15:30")


def test_partner_without_name_is_rejected():
    with pytest.raises(ValueError):
        coerce_partner(_row(vehicle_type="van"), CONFIG)
