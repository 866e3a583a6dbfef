"""
Pricing — subtotal, shipping, discount and grand total.

A pure function of (cart items, shipping fees, selected governorate,
discount descriptor or None). Recompute on every change; nothing is cached.

    totals = compute_totals(cart.snapshot(), fees, "Cairo", discount)
    totals.total
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from dataclasses import dataclass

from storefront._types import Money, ZERO, round_money
from storefront.domain import (
    CartLineItem,
    DiscountDescriptor,
    DiscountKind,
    ShippingFeeEntry,
)

HUNDRED = Decimal(100)


@dataclass(frozen=True, slots=True)
class Totals:
    subtotal: Money = ZERO
    shipping_fee: Money = ZERO
    discount_amount: Money = ZERO
    total: Money = ZERO

    def rounded(self) -> Totals:
        """Every figure at 2 dp, as sent to the server and shown to the user."""
        return Totals(
            subtotal=round_money(self.subtotal),
            shipping_fee=round_money(self.shipping_fee),
            discount_amount=round_money(self.discount_amount),
            total=round_money(self.total),
        )


def subtotal_of(items: Iterable[CartLineItem]) -> Money:
    """Sum of unit price × quantity."""
    return sum((item.product.price * item.quantity for item in items), ZERO)


def find_shipping_entry(
    fees: Iterable[ShippingFeeEntry],
    governorate: str | None,
) -> ShippingFeeEntry | None:
    """Exact, case-sensitive governorate match."""
    if not governorate:
        return None
    for entry in fees:
        if entry.governorate == governorate:
            return entry
    return None


def shipping_fee_for(fees: Iterable[ShippingFeeEntry], governorate: str | None) -> Money:
    entry = find_shipping_entry(fees, governorate)
    return entry.fee if entry is not None else ZERO


def discount_amount(subtotal: Money, discount: DiscountDescriptor | None) -> Money:
    """
    PERCENTAGE: subtotal × p / 100, clamped to max_discount_amount when set.
    FIXED: the fixed value as is, not compared to the subtotal.
    """
    match discount:
        case DiscountDescriptor(kind=DiscountKind.PERCENTAGE, percentage_value=Decimal() as percentage):
            amount = subtotal * percentage / HUNDRED
            cap = discount.max_discount_amount
            if cap is not None and amount > cap:
                return cap
            return amount
        case DiscountDescriptor(kind=DiscountKind.FIXED, fixed_value=Decimal() as fixed):
            return fixed
        case _:
            return ZERO


def compute_totals(
    items: Iterable[CartLineItem],
    fees: Iterable[ShippingFeeEntry],
    governorate: str | None,
    discount: DiscountDescriptor | None,
) -> Totals:
    """total = max(0, subtotal − discount + shipping)."""
    subtotal = subtotal_of(items)
    shipping = shipping_fee_for(fees, governorate)
    off = discount_amount(subtotal, discount)
    total = max(ZERO, subtotal - off + shipping)
    return Totals(subtotal=subtotal, shipping_fee=shipping, discount_amount=off, total=total)


__all__ = (
    "Totals",
    "subtotal_of",
    "find_shipping_entry",
    "shipping_fee_for",
    "discount_amount",
    "compute_totals",
)
