from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..db.batch_insert import BatchMetrics, batch_insert
from ..models.parse_result import ParseResult
from ..models.records import OrderRecord, PartnerRecord

"""Persistence and job-seed adapters for a ParseResult.

The ingest engine does not know about tenants. These helpers tag each record
with the caller-supplied organization id and write both streams to the
`orders` / `delivery_partners` tables. Whether warnings should block a write
is the caller's decision; nothing here inspects them.
"""

__all__ = [
    "ORDER_TABLE",
    "PARTNER_TABLE",
    "JOB_TABLE",
    "ORDER_COLUMNS",
    "PARTNER_COLUMNS",
    "PersistSummary",
    "order_rows",
    "partner_rows",
    "persist_result",
    "build_job_seed",
    "insert_job",
]

logger = logging.getLogger(__name__)

ORDER_TABLE = "orders"
PARTNER_TABLE = "delivery_partners"
JOB_TABLE = "jobs"

ORDER_COLUMNS = (
    "org_id",
    "external_id",
    "pickup_name",
    "pickup_lat",
    "pickup_lng",
    "drop_name",
    "drop_lat",
    "drop_lng",
    "priority",
    "service_minutes",
    "weight",
    "tw_start",
    "tw_end",
)
PARTNER_COLUMNS = (
    "org_id",
    "name",
    "vehicle_type",
    "capacity",
    "shift_start",
    "shift_end",
)


@dataclass(frozen=True)
class PersistSummary:
    orders: int
    partners: int


def order_rows(orders: Iterable[OrderRecord], org_id: str) -> list[tuple[Any, ...]]:
    """Insert tuples for ``orders`` in ORDER_COLUMNS order."""
    return [
        (
            org_id,
            o.external_id,
            o.pickup_name,
            o.pickup_lat,
            o.pickup_lng,
            o.drop_name,
            o.drop_lat,
            o.drop_lng,
            o.priority,
            o.service_minutes,
            o.weight,
            o.tw_start,
            o.tw_end,
        )
        for o in orders
    ]


def partner_rows(partners: Iterable[PartnerRecord], org_id: str) -> list[tuple[Any, ...]]:
    """Insert tuples for ``partners`` in PARTNER_COLUMNS order."""
    return [
        (org_id, p.name, p.vehicle_type.value, p.capacity, p.shift_start, p.shift_end)
        for p in partners
    ]


def _log_metrics(m: BatchMetrics) -> None:
    logger.debug(f"insert {m.table}: rows={m.batch_size} elapsed_sec={m.elapsed_seconds:.3f}")


def persist_result(cursor: Any, result: ParseResult, org_id: str) -> PersistSummary:
    """Bulk-insert both record streams. Commit/rollback stays with the caller.

    Raises:
        BatchInsertError: if either insert fails
    """
    if not org_id:
        raise ValueError("org_id is required to persist parsed records")
    orders = batch_insert(
        cursor,
        ORDER_TABLE,
        ORDER_COLUMNS,
        order_rows(result.orders, org_id),
        metrics_callback=_log_metrics,
    )
    partners = batch_insert(
        cursor,
        PARTNER_TABLE,
        PARTNER_COLUMNS,
        partner_rows(result.partners, org_id),
        metrics_callback=_log_metrics,
    )
    logger.debug(f"persisted org={org_id} orders={orders.inserted_rows} partners={partners.inserted_rows}")
    return PersistSummary(orders=orders.inserted_rows, partners=partners.inserted_rows)


def build_job_seed(
    result: ParseResult,
    org_id: str,
    name: str,
    optimization_type: str = "standard",
) -> dict[str, Any]:
    """Payload for the `jobs` table. Only the record counts are consumed."""
    return {
        "org_id": org_id,
        "name": name,
        "status": "pending",
        "optimization_type": optimization_type,
        "total_orders": len(result.orders),
        "assigned_partners": len(result.partners),
    }


def insert_job(cursor: Any, seed: dict[str, Any]) -> Any:
    """Insert a job seed built by build_job_seed and return its generated id."""
    columns = list(seed.keys())
    res = batch_insert(cursor, JOB_TABLE, columns, [tuple(seed[c] for c in columns)], returning="id")
    return res.returned_values[0][0] if res.returned_values else None
