"""
Discount resolver — validates a code against the server, re-derives the amount.

The server is authoritative for validity windows and usage limits (its
isActive flag already encodes them); the client only checks the flag and
the minimum order amount, then computes the amount for display.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront._types import Money
from storefront.api import ApiClient
from storefront.domain import AppliedDiscount
from storefront.errors import ApiErrorKind, DiscountError, DiscountErrors
from storefront.pricing import discount_amount

logger = logging.getLogger(__name__)


class DiscountResolver:
    __slots__ = ("_api",)

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def resolve(self, code: str, subtotal: Money) -> Result[AppliedDiscount, DiscountError]:
        locale = self._api.settings.locale
        code = code.strip()
        if not code:
            return Error(DiscountErrors.empty_code(locale))

        match await self._api.fetch_discount_code(code):
            case Error(err):
                if err.kind is ApiErrorKind.NOT_FOUND:
                    return Error(DiscountErrors.invalid_code(err, locale))
                logger.warning("Discount lookup for %r failed: %s", code, err)
                return Error(DiscountErrors.lookup_failed(err))
            case Ok(descriptor):
                pass

        if not descriptor.is_active:
            return Error(DiscountErrors.invalid_code(locale=locale))
        if descriptor.min_order_amount > subtotal:
            return Error(DiscountErrors.minimum_not_met(descriptor.min_order_amount, locale))

        amount = discount_amount(subtotal, descriptor)
        logger.info("Discount %r applied: %s off %s", code, amount, subtotal)
        return Ok(AppliedDiscount(code=code, amount=amount, descriptor=descriptor))


__all__ = ("DiscountResolver",)
