"""
Codec — the JSON boundary.

parse_* turn loosely shaped server payloads into domain objects and return
Result[T, ParseError]; *_payload build outbound bodies. Nothing outside this
module touches raw server dicts.

Defaults follow what the storefront has always shown for missing fields:
unnamed products are "Unknown Product", missing price is 0, missing
quantity is 1.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from kungfu import Result, Ok, Error

from storefront._types import Money, ZERO, money, format_money
from storefront.domain import (
    ProductRef,
    Product,
    CartLineItem,
    ServerCart,
    DiscountKind,
    DiscountDescriptor,
    ShippingFeeEntry,
    ShippingFeePage,
    PaymentMethod,
    OrderStatus,
    OrderSubmission,
    CreatedOrder,
    AuthTokens,
    Registration,
    Profile,
)
from storefront.errors import ParseError

UNKNOWN_PRODUCT = "Unknown Product"
UPLOAD_PREFIXES = ("/Uploads", "/images")


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _parsing[T](entity: str, raw: object, fn: Callable[[Mapping[str, Any]], T]) -> Result[T, ParseError]:
    """Run fn on a JSON object, turning shape errors into ParseError."""
    if not isinstance(raw, Mapping):
        return Error(ParseError(entity, f"expected object, got {type(raw).__name__}"))
    try:
        return Ok(fn(raw))
    except (KeyError, TypeError, ValueError) as e:
        return Error(ParseError(entity, str(e) or type(e).__name__))


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if value is None:
        raise ValueError(f"{key} is null")
    return str(value)


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _opt_money(data: Mapping[str, Any], key: str) -> Money | None:
    value = data.get(key)
    if value is None:
        return None
    return money(value)


def _int_or(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{key} is not an integer")
    return int(value)


def _opt_datetime(data: Mapping[str, Any], key: str) -> datetime | None:
    value = data.get(key)
    if not value:
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _lenient_datetime(data: Mapping[str, Any], key: str) -> datetime | None:
    # An order that was created must not fail over a display-only field.
    try:
        return _opt_datetime(data, key)
    except ValueError:
        return None


def _str_tuple(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"{key} is not a list")
    return tuple(str(v) for v in value)


def absolute_image_url(path: str, base_url: str) -> str:
    """Server-relative upload paths are served from the API host."""
    if path.startswith(UPLOAD_PREFIXES):
        return f"{base_url.rstrip('/')}{path}"
    return path


def _images(data: Mapping[str, Any], key: str, base_url: str) -> tuple[str, ...]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise ValueError(f"{key} is not a list")
    paths: list[str] = []
    for img in raw:
        if isinstance(img, Mapping):
            path = img.get("imagePath")
            if path:
                paths.append(absolute_image_url(str(path), base_url))
        elif isinstance(img, str) and img:
            paths.append(absolute_image_url(img, base_url))
    return tuple(paths)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


def _cart_line(item: Mapping[str, Any], base_url: str) -> CartLineItem:
    price = _opt_money(item, "price")
    return CartLineItem(
        product=ProductRef(
            id=_str(item, "productId"),
            name=str(item.get("productName") or UNKNOWN_PRODUCT),
            price=price if price else ZERO,
        ),
        quantity=int(item.get("quantity") or 1),
        size=_opt_str(item, "size"),
        color=_opt_str(item, "color"),
        images=_images(item, "images", base_url),
        line_id=_opt_str(item, "id"),
    )


def parse_cart(raw: object, base_url: str = "") -> Result[ServerCart, ParseError]:
    def build(data: Mapping[str, Any]) -> ServerCart:
        items = data.get("items") or []
        if not isinstance(items, list):
            raise ValueError("items is not a list")
        lines = []
        for item in items:
            if not isinstance(item, Mapping):
                raise ValueError("cart item is not an object")
            lines.append(_cart_line(item, base_url))
        total = _opt_money(data, "total")
        return ServerCart(
            items=tuple(lines),
            total=total if total is not None else ZERO,
            id=_opt_str(data, "id"),
        )
    return _parsing("cart", raw, build)


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping
# ═══════════════════════════════════════════════════════════════════════════════


def _shipping_fee(data: Mapping[str, Any]) -> ShippingFeeEntry:
    fee = money(data["fee"])
    if fee < 0:
        raise ValueError("fee is negative")
    return ShippingFeeEntry(
        governorate=_str(data, "governorate"),
        fee=fee,
        delivery_time=str(data.get("deliveryTime") or ""),
        status=_int_or(data, "status", 0),
        id=_opt_str(data, "id"),
    )


def parse_shipping_page(raw: object) -> Result[ShippingFeePage, ParseError]:
    def build(data: Mapping[str, Any]) -> ShippingFeePage:
        items = data.get("items") or []
        if not isinstance(items, list):
            raise ValueError("items is not a list")
        entries = []
        for item in items:
            if not isinstance(item, Mapping):
                raise ValueError("shipping fee is not an object")
            entries.append(_shipping_fee(item))
        return ShippingFeePage(
            items=tuple(entries),
            total_items=_int_or(data, "totalItems", len(entries)),
            page_number=_int_or(data, "pageNumber", 1),
            page_size=_int_or(data, "pageSize", len(entries)),
            total_pages=_int_or(data, "totalPages", 1),
        )
    return _parsing("shipping fees", raw, build)


# ═══════════════════════════════════════════════════════════════════════════════
# Discount
# ═══════════════════════════════════════════════════════════════════════════════


def parse_discount(raw: object) -> Result[DiscountDescriptor, ParseError]:
    """
    Kind is decided by which value is populated: a positive percentageValue
    means PERCENTAGE, otherwise a positive fixedValue means FIXED.
    """
    def build(data: Mapping[str, Any]) -> DiscountDescriptor:
        percentage = _opt_money(data, "percentageValue")
        fixed = _opt_money(data, "fixedValue")
        if percentage:
            kind = DiscountKind.PERCENTAGE
            fixed = None
        elif fixed:
            kind = DiscountKind.FIXED
            percentage = None
        else:
            raise ValueError("neither percentageValue nor fixedValue is set")
        min_order = _opt_money(data, "minOrderAmount")
        cap = _opt_money(data, "maxDiscountAmount")
        limit = data.get("usageLimit")
        return DiscountDescriptor(
            code=_str(data, "code"),
            kind=kind,
            percentage_value=percentage,
            fixed_value=fixed,
            min_order_amount=min_order if min_order is not None else ZERO,
            max_discount_amount=cap if cap else None,
            is_active=bool(data.get("isActive", False)),
            start_date=_opt_datetime(data, "startDate"),
            end_date=_opt_datetime(data, "endDate"),
            usage_limit=int(limit) if limit is not None else None,
            usage_count=_int_or(data, "usageCount", 0),
            id=_opt_str(data, "id"),
        )
    return _parsing("discount code", raw, build)


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


def map_status(value: object) -> OrderStatus:
    """Numeric order status; anything unknown reads as PENDING."""
    try:
        return OrderStatus(value)
    except ValueError:
        return OrderStatus.PENDING


def map_payment_method(value: object) -> PaymentMethod:
    """Numeric payment method; anything unknown reads as CASH."""
    try:
        return PaymentMethod(value)
    except ValueError:
        return PaymentMethod.CASH


def order_payload(submission: OrderSubmission) -> dict[str, Any]:
    """Body for POST /api/orders. Prices go out as JSON numbers."""
    customer = submission.customer
    return {
        "fullname": customer.full_name.strip(),
        "phonenumber": customer.phone.strip(),
        "address": customer.address.strip(),
        "governorate": customer.governorate,
        "discountCode": submission.discount_code or None,
        "paymentMethod": submission.payment_method.value,
        "items": [
            {
                "productId": line.product_id,
                "quantity": line.quantity,
                "priceAtPurchase": _json_number(line.price_at_purchase),
                "size": line.size or None,
                "color": line.color or None,
            }
            for line in submission.lines
        ],
    }


def parse_created_order(raw: object) -> Result[CreatedOrder, ParseError]:
    def build(data: Mapping[str, Any]) -> CreatedOrder:
        method = data.get("paymentMethod")
        return CreatedOrder(
            id=_opt_str(data, "id"),
            customer_id=_opt_str(data, "customerId"),
            status=map_status(data.get("status") or 0),
            payment_method=map_payment_method(method) if method is not None else None,
            date=_lenient_datetime(data, "date"),
        )
    return _parsing("order", raw, build)


def notification_payload(order_number: str, total: Money) -> dict[str, Any]:
    return {"orderNumber": order_number, "total": format_money(total)}


def cart_item_payload(product_id: str, quantity: int, size: str | None, color: str | None) -> dict[str, Any]:
    return {"productId": product_id, "quantity": quantity, "size": size, "color": color}


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth & account
# ═══════════════════════════════════════════════════════════════════════════════


def login_payload(email: str, password: str) -> dict[str, Any]:
    return {"Email": email, "Password": password}


def registration_payload(reg: Registration) -> dict[str, Any]:
    return {
        "FullName": reg.full_name,
        "Email": reg.email,
        "PhoneNumber": reg.phone_number,
        "Address": reg.address,
        "Governorate": reg.governorate,
        "Password": reg.password,
    }


def parse_tokens(raw: object) -> Result[AuthTokens, ParseError]:
    def build(data: Mapping[str, Any]) -> AuthTokens:
        access = data.get("accessToken")
        if not access:
            raise ValueError("accessToken is missing")
        roles = data.get("roles")
        return AuthTokens(
            access_token=str(access),
            refresh_token=str(data.get("refreshToken") or ""),
            roles=tuple(str(r) for r in roles) if isinstance(roles, list) else (),
        )
    return _parsing("login", raw, build)


def parse_profile(raw: object) -> Result[Profile, ParseError]:
    def build(data: Mapping[str, Any]) -> Profile:
        return Profile(
            full_name=str(data.get("fullName") or ""),
            email=str(data.get("email") or ""),
            address=str(data.get("address") or ""),
            governorate=str(data.get("governorate") or ""),
            phone_number=str(data.get("phoneNumber") or ""),
            is_email_verified=bool(data.get("isEmailVerified", False)),
            is_profile_complete=bool(data.get("isProfileComplete", False)),
            roles=_str_tuple(data, "roles"),
        )
    return _parsing("profile", raw, build)


def profile_payload(profile: Profile) -> dict[str, Any]:
    return {
        "FullName": profile.full_name,
        "Address": profile.address,
        "Governorate": profile.governorate,
        "PhoneNumber": profile.phone_number,
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


def parse_product(raw: object, base_url: str = "") -> Result[Product, ParseError]:
    def build(data: Mapping[str, Any]) -> Product:
        price = _opt_money(data, "price")
        return Product(
            id=_str(data, "id"),
            name=str(data.get("name") or UNKNOWN_PRODUCT),
            price=price if price else ZERO,
            sizes=_str_tuple(data, "sizes"),
            colors=_str_tuple(data, "colors"),
            images=_images(data, "images", base_url),
            is_hidden=bool(data.get("isHidden", False)),
            is_available=bool(data.get("isAvailable", True)),
        )
    return _parsing("product", raw, build)


__all__ = (
    "UNKNOWN_PRODUCT",
    "absolute_image_url",
    "parse_cart",
    "parse_shipping_page",
    "parse_discount",
    "map_status",
    "map_payment_method",
    "order_payload",
    "parse_created_order",
    "notification_payload",
    "cart_item_payload",
    "login_payload",
    "registration_payload",
    "parse_tokens",
    "parse_profile",
    "profile_payload",
    "parse_product",
)
