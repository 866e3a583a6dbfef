"""Tests for catalog lookups and the account profile."""

import json
from decimal import Decimal

import pytest

from storefront.account import AccountService
from storefront.api import ApiClient
from storefront.catalog import CatalogService
from storefront.config import Settings
from storefront.domain import Profile
from storefront.errors import ApiErrorKind, Text, text_for

from conftest import BASE_URL, err_value, ok_value

PRODUCT = {
    "id": "p1",
    "name": "Linen Shirt",
    "price": "349.50",
    "sizes": ["S", "M"],
    "colors": ["Red"],
    "images": [{"imagePath": "/Uploads/p1.jpg"}, "https://cdn.test/p1b.jpg"],
    "isHidden": False,
    "isAvailable": True,
}


class TestCatalog:
    async def test_fetch_product(self, api, server):
        server.on("GET", "/api/products/p1", (200, PRODUCT))

        product = ok_value(await CatalogService(api).fetch_product("p1"))

        assert product.price == Decimal("349.50")
        assert product.sizes == ("S", "M")
        assert product.images == ("https://api.test/Uploads/p1.jpg", "https://cdn.test/p1b.jpg")
        assert product.restriction is None

    async def test_hidden_product_has_restriction(self, api, server):
        server.on("GET", "/api/products/p1", (200, {**PRODUCT, "isHidden": True}))

        product = ok_value(await CatalogService(api).fetch_product("p1"))

        assert product.restriction is Text.PRODUCT_HIDDEN

    async def test_find_by_code(self, api, server):
        server.on("GET", "/api/products/code/LS-01", (200, PRODUCT))

        product = ok_value(await CatalogService(api).find_by_code(" LS-01 "))

        assert product.id == "p1"

    async def test_unknown_code(self, api, server):
        server.on("GET", "/api/products/code/NOPE", (404, None))

        err = err_value(await CatalogService(api).find_by_code("NOPE"))

        assert err.kind is ApiErrorKind.NOT_FOUND
        assert err.message == text_for(Text.NO_SUCH_PRODUCT_CODE)

    async def test_blank_code(self, api, server):
        err = err_value(await CatalogService(api).find_by_code("  "))

        assert err.kind is ApiErrorKind.VALIDATION
        assert server.requests == []


class TestAccount:
    async def test_fetch_profile(self, api, signed_in, server):
        server.on("GET", "/api/users/profile", (200, {
            "fullName": "Mona Adel",
            "email": "mona@example.com",
            "governorate": "Cairo",
            "isEmailVerified": True,
            "roles": ["Customer"],
        }))

        profile = ok_value(await AccountService(api).fetch_profile())

        assert profile.full_name == "Mona Adel"
        assert profile.is_email_verified
        assert profile.roles == ("Customer",)

    async def test_update_profile(self, api, signed_in, server):
        server.on("PUT", "/api/users/profile", (200, {"message": "Saved"}))
        profile = Profile(full_name="Mona A.", address="14 Nile St", governorate="Giza", phone_number="01012345678")

        assert ok_value(await AccountService(api).update_profile(profile)) == "Saved"
        assert json.loads(server.requests[0].content) == {
            "FullName": "Mona A.",
            "Address": "14 Nile St",
            "Governorate": "Giza",
            "PhoneNumber": "01012345678",
        }

    async def test_update_profile_default_message(self, api, signed_in, server):
        server.on("PUT", "/api/users/profile", (204, None))

        assert ok_value(await AccountService(api).update_profile(Profile())) == text_for(Text.PROFILE_UPDATED)

    async def test_profile_requires_session(self, api, server):
        err = err_value(await AccountService(api).fetch_profile())

        assert err.kind is ApiErrorKind.AUTH_REQUIRED
        assert server.requests == []


@pytest.fixture
async def arabic_api(tokens, guard, server):
    settings = Settings(api_base_url=BASE_URL, locale="ar")
    async with ApiClient(settings, tokens, guard, transport=server.transport) as client:
        yield client


class TestArabicLocale:
    async def test_unknown_code(self, arabic_api, server):
        server.on("GET", "/api/products/code/NOPE", (404, None))

        err = err_value(await CatalogService(arabic_api).find_by_code("NOPE"))

        assert err.message == "لا يوجد منتج بهذا الكود"

    async def test_blank_code(self, arabic_api):
        err = err_value(await CatalogService(arabic_api).find_by_code(""))

        assert err.message == "يرجى إدخال كود المنتج"

    async def test_profile_updated(self, arabic_api, signed_in, server):
        server.on("PUT", "/api/users/profile", (204, None))

        assert ok_value(await AccountService(arabic_api).update_profile(Profile())) == "تم تحديث الملف الشخصي"
