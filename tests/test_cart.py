"""Tests for the cart store and server sync."""

from decimal import Decimal

import pytest
from kungfu import Ok, Error

from storefront.api import ApiClient
from storefront.cart import CartStore, CartSync
from storefront.config import Settings
from storefront.domain import CartLineItem, Product, ProductRef, line_key
from storefront.errors import ApiErrorKind, Text, text_for

from conftest import BASE_URL, cart_body, cart_item

SHIRT = ProductRef("p1", "Linen Shirt", Decimal("100"))
HAT = ProductRef("p2", "Hat", Decimal("50"))


class TestCartStore:
    def test_add_merges_same_product_size_color(self):
        cart = CartStore()
        cart.add(SHIRT, 2, "M", "Red")
        line = cart.add(SHIRT, 1, "M", "Red")

        assert line.quantity == 3
        assert len(cart) == 1
        assert cart.item_count == 3

    def test_different_size_is_a_new_line(self):
        cart = CartStore()
        cart.add(SHIRT, 1, "M", "Red")
        cart.add(SHIRT, 1, "L", "Red")

        assert [item.key for item in cart.snapshot()] == [
            ("p1", "M", "Red"),
            ("p1", "L", "Red"),
        ]

    def test_subtotal(self):
        cart = CartStore()
        cart.add(SHIRT, 2)
        cart.add(HAT, 1)
        assert cart.subtotal == Decimal("250")

    def test_update_quantity_to_zero_removes(self):
        cart = CartStore()
        cart.add(SHIRT, 2)

        assert cart.update_quantity(line_key("p1"), 0) is None
        assert cart.is_empty

    def test_increment_and_decrement(self):
        cart = CartStore()
        cart.add(SHIRT, 1, "M")
        key = line_key("p1", "M")

        cart.increment(key)
        cart.increment(key)
        assert cart.get(key).quantity == 3

        cart.decrement(key, 3)
        assert cart.get(key) is None

    def test_remove_unknown_key(self):
        assert CartStore().remove(line_key("nope")) is False

    def test_set_cart_replaces_everything(self):
        cart = CartStore()
        cart.add(HAT, 4)
        cart.set_cart([CartLineItem(SHIRT, 2, "M", "Red")])

        assert [item.product.id for item in cart.snapshot()] == ["p1"]

    def test_listeners_see_each_change(self):
        cart = CartStore()
        seen = []
        unsubscribe = cart.subscribe(lambda snap: seen.append(len(snap)))

        cart.add(SHIRT)
        cart.add(HAT)
        cart.clear()
        cart.clear()  # no-op
        unsubscribe()
        cart.add(SHIRT)

        assert seen == [1, 2, 0]

    def test_snapshot_is_immutable(self):
        cart = CartStore()
        cart.add(SHIRT)
        snap = cart.snapshot()
        cart.add(HAT)

        assert len(snap) == 1

    def test_staged_add_rolls_back_only_its_quantity(self):
        cart = CartStore()
        cart.add(SHIRT, 2, "M", "Red")
        staged = cart.stage_add(SHIRT, 3, "M", "Red")
        assert cart.item_count == 5

        staged.rollback()
        staged.rollback()

        assert cart.item_count == 2

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            CartLineItem(SHIRT, 0)


class TestCartSync:
    async def test_hydrate_replaces_local_cart(self, api, signed_in, server, sleep):
        server.on("GET", "/api/cart", (200, cart_body(cart_item(quantity=3))))
        cart = CartStore([CartLineItem(HAT, 1)])

        result = await CartSync(api, cart).hydrate()

        assert isinstance(result, Ok)
        [line] = cart.snapshot()
        assert line.product.name == "Linen Shirt"
        assert line.quantity == 3
        assert line.images == ("https://api.test/Uploads/shirt.jpg",)

    async def test_hydrate_retries_transient_failures(self, api, signed_in, server, sleep):
        server.on(
            "GET",
            "/api/cart",
            (500, None),
            (503, None),
            (200, cart_body(cart_item())),
        )
        cart = CartStore()

        result = await CartSync(api, cart).hydrate()

        assert isinstance(result, Ok)
        assert len(server.calls("GET", "/api/cart")) == 3
        assert sleep.delays == [1.0, 1.0]

    async def test_hydrate_does_not_retry_client_errors(self, api, signed_in, server, sleep):
        server.on("GET", "/api/cart", (403, None))

        match await CartSync(api, CartStore()).hydrate():
            case Error(err):
                assert err.kind is ApiErrorKind.FORBIDDEN
            case Ok(_):
                pytest.fail("expected an error")
        assert sleep.delays == []

    async def test_add_from_product_posts_and_keeps_line(self, api, signed_in, server):
        server.on("POST", "/api/cart/items", (200, None))
        cart = CartStore()
        product = Product("p1", "Linen Shirt", Decimal("100"))

        result = await CartSync(api, cart).add_from_product(product, 2, "M", "Red")

        assert isinstance(result, Ok)
        assert cart.item_count == 2
        [request] = server.calls("POST", "/api/cart/items")
        assert request.headers["Authorization"].startswith("Bearer ")

    async def test_add_from_product_rolls_back_on_failure(self, api, signed_in, server):
        server.on("POST", "/api/cart/items", (400, {"message": "Out of stock"}))
        cart = CartStore()
        product = Product("p1", "Linen Shirt", Decimal("100"))

        match await CartSync(api, cart).add_from_product(product, 1, "M", "Red"):
            case Error(err):
                assert err.message == "Out of stock"
            case Ok(_):
                pytest.fail("expected an error")
        assert cart.is_empty

    async def test_add_requires_login(self, api, server):
        product = Product("p1", "Linen Shirt", Decimal("100"))

        result = await CartSync(api, CartStore()).add_from_product(product)

        assert isinstance(result, Error)
        assert server.requests == []

    async def test_unavailable_product_is_refused_locally(self, api, signed_in, server):
        product = Product("p1", "Linen Shirt", Decimal("100"), is_available=False)

        match await CartSync(api, CartStore()).add_from_product(product):
            case Error(err):
                assert err.kind is ApiErrorKind.FORBIDDEN
                assert err.message == text_for(Text.PRODUCT_UNAVAILABLE)
            case Ok(_):
                pytest.fail("expected an error")
        assert server.requests == []

    async def test_refusals_follow_locale(self, tokens, guard, server):
        settings = Settings(api_base_url=BASE_URL, locale="ar")
        hidden = Product("p1", "Linen Shirt", Decimal("100"), is_hidden=True)
        visible = Product("p2", "Hat", Decimal("50"))

        async with ApiClient(settings, tokens, guard, transport=server.transport) as api:
            sync = CartSync(api, CartStore())
            match await sync.add_from_product(hidden):
                case Error(err):
                    assert err.message == "هذا المنتج غير مرئي للجمهور حالياً."
                case Ok(_):
                    pytest.fail("expected an error")
            match await sync.add_from_product(visible):
                case Error(err):
                    assert err.message == "يرجى تسجيل الدخول أولاً"
                case Ok(_):
                    pytest.fail("expected an error")
        assert server.requests == []
