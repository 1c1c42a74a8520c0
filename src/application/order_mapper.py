"""Pure mappings from loaded orders and projection rows to response shapes.

Nothing here loads data. Every association must already be Resolved when a
mapper runs; an Unresolved one raises ``UnresolvedAssociationError``.
"""

from collections.abc import Mapping
from typing import Any

from src.domain.order import Order, OrderSummary


def map_order_to_summary(order: Order) -> OrderSummary:
    """Convert a resolved ``Order`` to an ``OrderSummary``."""
    member = order.require_member()
    delivery = order.require_delivery()
    return OrderSummary(
        order_id=order.id,
        member_name=member.name,
        order_date=order.order_date,
        status=order.status,
        address=delivery.address,
    )


def map_row_to_summary(row: Mapping[str, Any]) -> OrderSummary:
    """Build an ``OrderSummary`` from a projection row keyed by field name."""
    return OrderSummary.model_validate(dict(row))


def dump_order_entity(order: Order) -> dict[str, Any]:
    """Serialize a resolved ``Order`` entity for the raw-entity endpoint.

    Relations are written in the owning direction only (order -> member,
    order -> delivery).
    """
    member = order.require_member()
    delivery = order.require_delivery()
    own = order.model_dump(mode="json", include={"id", "order_date", "status"})
    return {
        "orderId": own["id"],
        "member": member.model_dump(mode="json"),
        "delivery": delivery.model_dump(mode="json"),
        "orderDate": own["order_date"],
        "status": own["status"],
    }


def dump_summary(summary: OrderSummary) -> dict[str, Any]:
    return summary.model_dump(mode="json", by_alias=True)
