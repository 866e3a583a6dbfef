"""
Catalog — product lookups for the product page and the search-by-code box.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from storefront.api import ApiClient
from storefront.domain import Product
from storefront.errors import ApiError, ApiErrorKind, Text, text_for


class CatalogService:
    __slots__ = ("_api",)

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def fetch_product(self, product_id: str) -> Result[Product, ApiError]:
        return await self._api.fetch_product(product_id)

    async def find_by_code(self, code: str) -> Result[Product, ApiError]:
        locale = self._api.settings.locale
        if not code.strip():
            return Error(ApiError(ApiErrorKind.VALIDATION, text_for(Text.PRODUCT_CODE_REQUIRED, locale)))
        match await self._api.find_product_by_code(code):
            case Error(err) if err.kind is ApiErrorKind.NOT_FOUND:
                return Error(err.with_message(text_for(Text.NO_SUCH_PRODUCT_CODE, locale)))
            case Error(err):
                return Error(err)
            case Ok(product):
                return Ok(product)


__all__ = ("CatalogService",)
