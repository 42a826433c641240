from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ..models.row_data import RowData
from ..tabular.normalizer import is_empty_cell

"""Record classifier: decide whether a row is an order, a partner, or neither.

Classification is row-local. The header set says which kinds a sheet *could*
hold; the row's own populated fields decide which kind it *is*. Orders win when
both match because order sheets commonly carry a customer "name" column.
"""

__all__ = [
    "RowKind",
    "ORDER_SIGNAL_HEADERS",
    "PARTNER_SIGNAL_HEADERS",
    "ORDER_KEY_FIELDS",
    "PARTNER_NAME_FIELDS",
    "looks_like_orders",
    "looks_like_partners",
    "classify",
]

ORDER_SIGNAL_HEADERS = frozenset(
    {"pickup_name", "pickup_lat", "drop_name", "drop_lat", "order_id", "external_id"}
)
PARTNER_SIGNAL_HEADERS = frozenset(
    {"name", "vehicle_type", "capacity", "partner_name", "driver_name"}
)

# A row must populate at least one of these to be taken as that kind
ORDER_KEY_FIELDS = ("pickup_name", "drop_name")
PARTNER_NAME_FIELDS = ("name", "partner_name", "driver_name")


class RowKind(Enum):
    ORDER = "order"
    PARTNER = "partner"
    UNCLASSIFIED = "unclassified"


def looks_like_orders(headers: Iterable[str]) -> bool:
    return not ORDER_SIGNAL_HEADERS.isdisjoint(headers)


def looks_like_partners(headers: Iterable[str]) -> bool:
    return not PARTNER_SIGNAL_HEADERS.isdisjoint(headers)


def _has_any(row: RowData, keys: Iterable[str]) -> bool:
    return any(not is_empty_cell(row.get(k)) for k in keys)


def classify(headers: Iterable[str], row: RowData) -> RowKind:
    """Classify one normalized row against the sheet's header set."""
    header_set = frozenset(headers)
    if looks_like_orders(header_set) and _has_any(row, ORDER_KEY_FIELDS):
        return RowKind.ORDER
    if looks_like_partners(header_set) and _has_any(row, PARTNER_NAME_FIELDS):
        return RowKind.PARTNER
    return RowKind.UNCLASSIFIED
