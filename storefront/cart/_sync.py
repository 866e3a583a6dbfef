"""
Cart sync — keeping the local cart and the server cart in step.

The server cart is the source of truth. Adds from a product page are staged
locally for immediate feedback and rolled back if the server refuses them;
quick adds are local only and get reconciled by the next hydrate().
"""

from __future__ import annotations

import logging

from combinators import retry as C_retry
from kungfu import Result, Ok, Error

from storefront.api import ApiClient
from storefront.cart._store import CartStore
from storefront.domain import Product, ProductRef, ServerCart
from storefront.errors import ApiError, ApiErrorKind, Text, text_for

logger = logging.getLogger(__name__)


class CartSync:
    __slots__ = ("_api", "_cart")

    def __init__(self, api: ApiClient, cart: CartStore) -> None:
        self._api = api
        self._cart = cart

    async def hydrate(self) -> Result[ServerCart, ApiError]:
        """Fetch the server cart (with the cart retry policy) and replace the local one."""
        result = await C_retry(self._api.fetch_cart(), policy=self._api.settings.cart_retry)
        match result:
            case Ok(server_cart):
                self._cart.set_cart(server_cart.items)
                logger.info("Cart hydrated with %d lines", len(server_cart.items))
            case Error(err):
                logger.error("Cart hydrate failed: %s", err)
        return result

    async def add_from_product(
        self,
        product: Product,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
    ) -> Result[None, ApiError]:
        """Stage locally, POST, roll back on failure."""
        locale = self._api.settings.locale
        restriction = product.restriction
        if restriction is not None:
            return Error(ApiError(ApiErrorKind.FORBIDDEN, text_for(restriction, locale)))
        if not self._api.has_session:
            return Error(ApiError(ApiErrorKind.AUTH_REQUIRED, text_for(Text.LOGIN_FIRST, locale)))

        staged = self._cart.stage_add(product.ref, quantity, size, color, product.images)
        result = await self._api.add_cart_item(product.id, quantity, size, color)
        match result:
            case Ok(_):
                logger.info("Added %d x %s to cart", quantity, product.id)
            case Error(err):
                staged.rollback()
                logger.warning("Add to cart refused for %s: %s", product.id, err)
        return result

    def quick_add(
        self,
        product: ProductRef,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
    ) -> None:
        """Local only; the server learns about it on the next hydrate or checkout load."""
        self._cart.add(product, quantity, size, color)


__all__ = ("CartSync",)
