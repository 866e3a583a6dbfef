"""
Domain — storefront cart and checkout.

Internal, already-validated representations. Raw server JSON never goes
past storefront.codec; everything here is strict.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront._types import Money, ZERO
from storefront.errors import Text


# ═══════════════════════════════════════════════════════════════════════════════
# Product Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductRef:
    """What a cart line needs to know about a product."""

    id: str
    name: str
    price: Money


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price: Money
    sizes: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    is_hidden: bool = False
    is_available: bool = True

    @property
    def ref(self) -> ProductRef:
        return ProductRef(self.id, self.name, self.price)

    @property
    def restriction(self) -> Text | None:
        """Why this product cannot be bought right now, if anything."""
        if not self.is_available:
            return Text.PRODUCT_UNAVAILABLE
        if self.is_hidden:
            return Text.PRODUCT_HIDDEN
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Domain
# ═══════════════════════════════════════════════════════════════════════════════

type LineKey = tuple[str, str | None, str | None]
"""(product id, size, color) — a line item's identity."""


@dataclass(frozen=True, slots=True)
class CartLineItem:
    product: ProductRef
    quantity: int
    size: str | None = None
    color: str | None = None
    images: tuple[str, ...] = ()
    line_id: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")

    @property
    def key(self) -> LineKey:
        return (self.product.id, self.size, self.color)

    @property
    def line_total(self) -> Money:
        return self.product.price * self.quantity


def line_key(product_id: str, size: str | None = None, color: str | None = None) -> LineKey:
    return (product_id, size, color)


@dataclass(frozen=True, slots=True)
class ServerCart:
    """GET /api/cart, parsed."""

    items: tuple[CartLineItem, ...]
    total: Money = ZERO
    id: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Discount Domain
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class DiscountDescriptor:
    """
    Server-resolved effect of a discount code.

    Exactly one of percentage_value / fixed_value is set, matching kind.
    max_discount_amount only caps PERCENTAGE discounts.
    """

    code: str
    kind: DiscountKind
    percentage_value: Money | None
    fixed_value: Money | None
    min_order_amount: Money = ZERO
    max_discount_amount: Money | None = None
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is DiscountKind.PERCENTAGE and self.percentage_value is None:
            raise ValueError("percentage discount without percentage_value")
        if self.kind is DiscountKind.FIXED and self.fixed_value is None:
            raise ValueError("fixed discount without fixed_value")


@dataclass(frozen=True, slots=True)
class AppliedDiscount:
    """A code the user applied, with the amount it was worth at the time."""

    code: str
    amount: Money
    descriptor: DiscountDescriptor


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingFeeEntry:
    governorate: str
    fee: Money
    delivery_time: str = ""
    status: int = 0
    id: str | None = None


@dataclass(frozen=True, slots=True)
class ShippingFeePage:
    items: tuple[ShippingFeeEntry, ...]
    total_items: int
    page_number: int
    page_size: int
    total_pages: int


# ═══════════════════════════════════════════════════════════════════════════════
# Order Domain
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    CASH = 0
    CARD = 1
    ONLINE = 2

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


_PAYMENT_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.ONLINE: "OnlinePayment",
}


class OrderStatus(Enum):
    PENDING = 0
    CONFIRMED = 1
    PROCESSING = 2
    SHIPPED = 3
    DELIVERED = 4
    CANCELLED = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True, slots=True)
class CustomerDetails:
    full_name: str
    phone: str
    address: str
    governorate: str


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: str
    quantity: int
    price_at_purchase: Money
    size: str | None = None
    color: str | None = None
    product_name: str = ""

    @classmethod
    def from_cart(cls, item: CartLineItem) -> OrderLine:
        return cls(
            product_id=item.product.id,
            quantity=item.quantity,
            price_at_purchase=item.product.price,
            size=item.size,
            color=item.color,
            product_name=item.product.name,
        )


@dataclass(frozen=True, slots=True)
class OrderSubmission:
    """Everything POST /api/orders needs, frozen at submit time."""

    customer: CustomerDetails
    payment_method: PaymentMethod
    lines: tuple[OrderLine, ...]
    discount_code: str | None = None


@dataclass(frozen=True, slots=True)
class CreatedOrder:
    """POST /api/orders response, parsed."""

    id: str | None
    customer_id: str | None
    status: OrderStatus
    payment_method: PaymentMethod | None
    date: datetime | None


@dataclass(frozen=True, slots=True)
class OrderRecord:
    """Local display record for a placed order. Money is rounded to 2 dp."""

    id: str
    customer_id: str
    lines: tuple[OrderLine, ...]
    total: Money
    shipping_fee: Money
    discount_code: str | None
    discount_amount: Money
    payment_method: PaymentMethod
    status: OrderStatus
    created_at: datetime
    customer: CustomerDetails


# ═══════════════════════════════════════════════════════════════════════════════
# Account Domain
# ═══════════════════════════════════════════════════════════════════════════════


class UserRole(Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


@dataclass(frozen=True, slots=True)
class AuthTokens:
    access_token: str
    refresh_token: str
    roles: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Registration:
    full_name: str
    email: str
    phone_number: str
    address: str
    governorate: str
    password: str


@dataclass(frozen=True, slots=True)
class Profile:
    full_name: str = ""
    email: str = ""
    address: str = ""
    governorate: str = ""
    phone_number: str = ""
    is_email_verified: bool = False
    is_profile_complete: bool = False
    roles: tuple[str, ...] = ()


__all__ = (
    "ProductRef",
    "Product",
    "LineKey",
    "CartLineItem",
    "line_key",
    "ServerCart",
    "DiscountKind",
    "DiscountDescriptor",
    "AppliedDiscount",
    "ShippingFeeEntry",
    "ShippingFeePage",
    "PaymentMethod",
    "OrderStatus",
    "CustomerDetails",
    "OrderLine",
    "OrderSubmission",
    "CreatedOrder",
    "OrderRecord",
    "UserRole",
    "User",
    "AuthTokens",
    "Registration",
    "Profile",
)
