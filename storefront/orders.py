"""
Orders — local order history and the display record for a placed order.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from datetime import datetime, timezone

from storefront.domain import (
    CreatedOrder,
    OrderRecord,
    OrderSubmission,
)
from storefront.pricing import Totals

ANONYMOUS_CUSTOMER = "authenticated-user"


def build_order_record(
    created: CreatedOrder,
    submission: OrderSubmission,
    totals: Totals,
    *,
    now: datetime | None = None,
) -> OrderRecord:
    """
    Map the server's answer onto a local record.

    The server's payment method wins over what was submitted; a missing id
    becomes order-<epoch ms>.
    """
    rounded = totals.rounded()
    now = now or datetime.now(timezone.utc)
    order_id = created.id or f"order-{int(time.time() * 1000)}"
    return OrderRecord(
        id=order_id,
        customer_id=created.customer_id or ANONYMOUS_CUSTOMER,
        lines=submission.lines,
        total=rounded.total,
        shipping_fee=rounded.shipping_fee,
        discount_code=submission.discount_code,
        discount_amount=rounded.discount_amount,
        payment_method=created.payment_method or submission.payment_method,
        status=created.status,
        created_at=created.date or now,
        customer=submission.customer,
    )


class OrderHistory:
    """Orders placed in this session, oldest first."""

    __slots__ = ("_orders",)

    def __init__(self) -> None:
        self._orders: list[OrderRecord] = []

    def add(self, order: OrderRecord) -> None:
        self._orders.append(order)

    def get(self, order_id: str) -> OrderRecord | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    @property
    def latest(self) -> OrderRecord | None:
        return self._orders[-1] if self._orders else None

    def __iter__(self) -> Iterator[OrderRecord]:
        return iter(tuple(self._orders))

    def __len__(self) -> int:
        return len(self._orders)


__all__ = ("ANONYMOUS_CUSTOMER", "build_order_record", "OrderHistory")
