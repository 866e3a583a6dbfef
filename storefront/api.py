"""
API client — every remote call the storefront makes.

Each endpoint returns a LazyCoroResult[T, ApiError]: nothing is sent until
it is awaited, so endpoints compose with retry and parallel:

    async with ApiClient(settings, tokens, guard) as api:
        match await api.fetch_cart():
            case Ok(cart):
                ...
            case Error(e):
                print(e.message)

Transport exceptions become NETWORK errors, non-2xx statuses are classified
by storefront.errors, and 2xx bodies are parsed by storefront.codec. A 401 on
any call that carried a bearer token expires the session through the guard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, auto
from typing import Any
from urllib.parse import quote

import httpx
from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from storefront import codec
from storefront._types import Money
from storefront.config import Settings
from storefront.domain import (
    ServerCart,
    ShippingFeeEntry,
    ShippingFeePage,
    DiscountDescriptor,
    OrderSubmission,
    CreatedOrder,
    AuthTokens,
    Registration,
    Product,
    Profile,
)
from storefront.errors import ApiError, ApiErrors, ParseError
from storefront.session import SessionGuard, TokenStore, read_access_token

logger = logging.getLogger(__name__)

# Upper bound when walking a paginated collection
MAX_PAGES = 100

type Parser[T] = Callable[[Any], Result[T, ParseError]]


class Auth(Enum):
    """
    NONE      never send a token
    OPTIONAL  send the token when one is stored
    REQUIRED  fail with AUTH_REQUIRED, without a request, when none is stored
    """

    NONE = auto()
    OPTIONAL = auto()
    REQUIRED = auto()


class ApiClient:
    def __init__(
        self,
        settings: Settings,
        tokens: TokenStore,
        guard: SessionGuard | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._tokens = tokens
        self._guard = guard
        kwargs: dict[str, Any] = {"base_url": settings.base_url}
        if settings.request_timeout is not None:
            kwargs["timeout"] = settings.request_timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._http = httpx.AsyncClient(**kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    @property
    def has_session(self) -> bool:
        return read_access_token(self._tokens) is not None

    # ═══════════════════════════════════════════════════════════════════════════
    # Core
    # ═══════════════════════════════════════════════════════════════════════════

    def _call[T](
        self,
        method: str,
        path: str,
        *,
        auth: Auth,
        parse: Parser[T] | None = None,
        json: object = None,
        params: dict[str, Any] | None = None,
        server_message: bool = False,
    ) -> LazyCoroResult[T, ApiError]:
        locale = self.settings.locale

        async def _run() -> Result[T, ApiError]:
            headers = {"Accept": "application/json"}
            token = read_access_token(self._tokens) if auth is not Auth.NONE else None
            if auth is Auth.REQUIRED and token is None:
                logger.warning("%s %s: no stored session", method, path)
                return Error(ApiErrors.no_token(locale))
            if token is not None:
                headers["Authorization"] = f"Bearer {token}"

            sent = await L.catching_async(
                lambda: self._http.request(method, path, json=json, params=params, headers=headers),
                on_error=lambda e: ApiErrors.network(e, locale),
            )
            match sent:
                case Error(err):
                    logger.warning("%s %s: %s", method, path, err)
                    return Error(err)
                case Ok(response):
                    return self._handle(method, path, response, token, parse, server_message)

        return LazyCoroResult(_run)

    def _handle[T](
        self,
        method: str,
        path: str,
        response: httpx.Response,
        token: str | None,
        parse: Parser[T] | None,
        server_message: bool,
    ) -> Result[T, ApiError]:
        locale = self.settings.locale
        if not response.is_success:
            err = ApiErrors.from_status(response.status_code, response.text, locale)
            if server_message:
                message = _server_message(response)
                if message:
                    err = err.with_message(message)
            logger.warning("%s %s failed with status %d", method, path, response.status_code)
            if response.status_code == 401 and token is not None and self._guard is not None:
                self._guard.expire()
            return Error(err)

        if parse is None:
            return Ok(None)  # type: ignore[arg-type]

        try:
            body = response.json() if response.content else None
        except ValueError as e:
            logger.error("%s %s: response is not JSON: %s", method, path, e)
            return Error(ApiErrors.malformed(str(e), locale))

        match parse(body):
            case Ok(value):
                return Ok(value)
            case Error(pe):
                logger.error("%s %s: %s", method, path, pe)
                return Error(ApiErrors.malformed(str(pe), locale))

    # ═══════════════════════════════════════════════════════════════════════════
    # Cart
    # ═══════════════════════════════════════════════════════════════════════════

    def fetch_cart(self) -> LazyCoroResult[ServerCart, ApiError]:
        base = self.settings.base_url
        return self._call(
            "GET",
            "/api/cart",
            auth=Auth.REQUIRED,
            parse=lambda raw: codec.parse_cart(raw, base),
        )

    def add_cart_item(
        self,
        product_id: str,
        quantity: int,
        size: str | None = None,
        color: str | None = None,
    ) -> LazyCoroResult[None, ApiError]:
        return self._call(
            "POST",
            "/api/cart/items",
            auth=Auth.REQUIRED,
            json=codec.cart_item_payload(product_id, quantity, size, color),
            server_message=True,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Shipping
    # ═══════════════════════════════════════════════════════════════════════════

    def fetch_shipping_fees(
        self,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> LazyCoroResult[ShippingFeePage, ApiError]:
        return self._call(
            "GET",
            "/api/shipping-fees",
            auth=Auth.OPTIONAL,
            params={
                "pageNumber": page_number,
                "pageSize": page_size or self.settings.shipping_page_size,
            },
            parse=codec.parse_shipping_page,
        )

    def fetch_all_shipping_fees(self) -> LazyCoroResult[tuple[ShippingFeeEntry, ...], ApiError]:
        """Walk every page; the first failing page fails the whole fetch."""
        async def _run() -> Result[tuple[ShippingFeeEntry, ...], ApiError]:
            entries: list[ShippingFeeEntry] = []
            page_number = 1
            while True:
                match await self.fetch_shipping_fees(page_number):
                    case Error(err):
                        return Error(err)
                    case Ok(page):
                        entries.extend(page.items)
                        if page_number >= min(page.total_pages, MAX_PAGES) or not page.items:
                            return Ok(tuple(entries))
                        page_number += 1

        return LazyCoroResult(_run)

    # ═══════════════════════════════════════════════════════════════════════════
    # Discount
    # ═══════════════════════════════════════════════════════════════════════════

    def fetch_discount_code(self, code: str) -> LazyCoroResult[DiscountDescriptor, ApiError]:
        return self._call(
            "GET",
            f"/api/discount-codes/code/{quote(code, safe='')}",
            auth=Auth.NONE,
            parse=codec.parse_discount,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Orders
    # ═══════════════════════════════════════════════════════════════════════════

    def create_order(self, submission: OrderSubmission) -> LazyCoroResult[CreatedOrder, ApiError]:
        payload = codec.order_payload(submission)
        logger.debug("Submitting order: %s", payload)
        return self._call(
            "POST",
            "/api/orders",
            auth=Auth.REQUIRED,
            json=payload,
            parse=codec.parse_created_order,
        )

    def notify_admin(self, order_number: str, total: Money) -> LazyCoroResult[None, ApiError]:
        return self._call(
            "POST",
            "/api/notification/send",
            auth=Auth.REQUIRED,
            json=codec.notification_payload(order_number, total),
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Auth
    # ═══════════════════════════════════════════════════════════════════════════

    def login(self, email: str, password: str) -> LazyCoroResult[AuthTokens, ApiError]:
        return self._call(
            "POST",
            "/api/auth/login",
            auth=Auth.NONE,
            json=codec.login_payload(email, password),
            parse=codec.parse_tokens,
            server_message=True,
        )

    def register(self, registration: Registration) -> LazyCoroResult[None, ApiError]:
        return self._call(
            "POST",
            "/api/auth/register",
            auth=Auth.NONE,
            json=codec.registration_payload(registration),
            server_message=True,
        )

    def forgot_password(self, email: str) -> LazyCoroResult[None, ApiError]:
        return self._call(
            "POST",
            "/api/auth/forgot-password",
            auth=Auth.NONE,
            json={"Email": email},
            server_message=True,
        )

    def reset_password(self, email: str, token: str, new_password: str) -> LazyCoroResult[None, ApiError]:
        return self._call(
            "POST",
            "/api/auth/reset-password",
            auth=Auth.NONE,
            json={"Email": email, "Token": token, "NewPassword": new_password},
            server_message=True,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Catalog
    # ═══════════════════════════════════════════════════════════════════════════

    def fetch_product(self, product_id: str) -> LazyCoroResult[Product, ApiError]:
        base = self.settings.base_url
        return self._call(
            "GET",
            f"/api/products/{quote(product_id, safe='')}",
            auth=Auth.OPTIONAL,
            parse=lambda raw: codec.parse_product(raw, base),
        )

    def find_product_by_code(self, code: str) -> LazyCoroResult[Product, ApiError]:
        base = self.settings.base_url
        return self._call(
            "GET",
            f"/api/products/code/{quote(code.strip(), safe='')}",
            auth=Auth.OPTIONAL,
            parse=lambda raw: codec.parse_product(raw, base),
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Account
    # ═══════════════════════════════════════════════════════════════════════════

    def fetch_profile(self) -> LazyCoroResult[Profile, ApiError]:
        return self._call(
            "GET",
            "/api/users/profile",
            auth=Auth.REQUIRED,
            parse=codec.parse_profile,
        )

    def update_profile(self, profile: Profile) -> LazyCoroResult[str | None, ApiError]:
        """Ok carries the server's confirmation message, if it sent one."""
        return self._call(
            "PUT",
            "/api/users/profile",
            auth=Auth.REQUIRED,
            json=codec.profile_payload(profile),
            parse=_message_of,
            server_message=True,
        )


def _server_message(response: httpx.Response) -> str | None:
    """The Message/message field of an error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("Message") or body.get("message")
        if message:
            return str(message)
    return None


def _message_of(raw: Any) -> Result[str | None, ParseError]:
    if isinstance(raw, dict) and raw.get("message"):
        return Ok(str(raw["message"]))
    return Ok(None)


__all__ = ("MAX_PAGES", "Auth", "ApiClient")
