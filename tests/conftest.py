"""Pytest fixtures for storefront tests."""

import asyncio
import base64
import json
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from kungfu import Ok, Error

from storefront.api import ApiClient
from storefront.config import Settings
from storefront.session import MemoryTokenStore, SessionGuard, save_tokens

BASE_URL = "https://api.test"

type Reply = tuple[int, Any] | Exception | Callable[[httpx.Request], httpx.Response]


# ═══════════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════════


class FakeServer:
    """
    Scripted HTTP backend for httpx.MockTransport.

    Each route holds a queue of replies; the last one repeats. A reply is a
    (status, json body) pair, an exception to raise, or a request handler.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Reply]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, *replies: Reply) -> None:
        self.routes[(method, path)] = list(replies)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "no route"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        status, body = reply
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeNavigator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    def go(self, route: str, *, replace: bool = False) -> None:
        self.calls.append((route, replace))


class RecordingSleep:
    """
    asyncio.sleep stand-in that records non-zero delays.

    Every call still yields to the event loop once, so sleep(0) keeps
    working as a scheduling point.
    """

    def __init__(self, real: Callable[[float], Any]) -> None:
        self.delays: list[float] = []
        self._real = real

    async def __call__(self, seconds: float, result: Any = None) -> Any:
        if seconds > 0:
            self.delays.append(seconds)
        await self._real(0)
        return result


def make_token(
    sub: str = "user-1",
    email: str = "mona@example.com",
    roles: str | list[str] | None = None,
    exp: float | None = None,
) -> str:
    """Unsigned JWT with the claims the storefront reads."""
    def encode(obj: dict[str, Any]) -> str:
        raw = json.dumps(obj).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    payload: dict[str, Any] = {
        "sub": sub,
        "email": email,
        "exp": exp if exp is not None else time.time() + 3600,
    }
    if roles is not None:
        payload["http://schemas.microsoft.com/ws/2008/06/identity/claims/role"] = roles
    return f"{encode({'alg': 'HS256', 'typ': 'JWT'})}.{encode(payload)}.signature"


# ═══════════════════════════════════════════════════════════════════════════════
# Payloads
# ═══════════════════════════════════════════════════════════════════════════════


def cart_body(*items: dict[str, Any]) -> dict[str, Any]:
    return {"id": "cart-1", "items": list(items), "total": 0}


def cart_item(
    product_id: str = "p1",
    price: Any = 100,
    quantity: int = 2,
    size: str | None = "M",
    color: str | None = "Red",
) -> dict[str, Any]:
    return {
        "id": f"line-{product_id}",
        "productId": product_id,
        "productName": "Linen Shirt",
        "price": price,
        "quantity": quantity,
        "size": size,
        "color": color,
        "images": [{"imagePath": "/Uploads/shirt.jpg"}],
    }


def shipping_page(
    *entries: tuple[str, Any],
    page: int = 1,
    total_pages: int = 1,
) -> dict[str, Any]:
    return {
        "items": [
            {"id": f"fee-{gov}", "governorate": gov, "fee": fee, "deliveryTime": "2-3 days", "status": 1}
            for gov, fee in entries
        ],
        "totalItems": len(entries),
        "pageNumber": page,
        "pageSize": 10,
        "totalPages": total_pages,
    }


def discount_body(
    code: str = "SAVE10",
    percentage: Any = 10,
    fixed: Any = 0,
    min_order: Any = 50,
    cap: Any = 15,
    active: bool = True,
) -> dict[str, Any]:
    return {
        "id": "d-1",
        "code": code,
        "percentageValue": percentage,
        "fixedValue": fixed,
        "minOrderAmount": min_order,
        "maxDiscountAmount": cap,
        "isActive": active,
        "startDate": "2026-01-01T00:00:00Z",
        "endDate": "2026-12-31T00:00:00Z",
        "usageLimit": 100,
        "usageCount": 3,
    }


def created_order_body(order_id: str = "order-42") -> dict[str, Any]:
    return {
        "id": order_id,
        "customerId": "user-1",
        "status": 0,
        "paymentMethod": 0,
        "date": "2026-03-01T10:00:00Z",
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def settings():
    return Settings(api_base_url=BASE_URL + "/")


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture(autouse=True)
def sleep(monkeypatch):
    """Patch asyncio.sleep so retry delays are recorded, not waited."""
    recorder = RecordingSleep(asyncio.sleep)
    monkeypatch.setattr(asyncio, "sleep", recorder)
    return recorder


@pytest.fixture
def tokens():
    return MemoryTokenStore()


@pytest.fixture
def signed_in(tokens):
    """Store a valid session."""
    save_tokens(tokens, make_token(), "refresh-1")
    return tokens


@pytest.fixture
def guard(tokens, navigator):
    return SessionGuard(tokens, navigator)


@pytest.fixture
async def api(settings, tokens, guard, server):
    client = ApiClient(settings, tokens, guard, transport=server.transport)
    yield client
    await client.aclose()


# ═══════════════════════════════════════════════════════════════════════════════
# Result helpers
# ═══════════════════════════════════════════════════════════════════════════════


def ok_value(result):
    match result:
        case Ok(value):
            return value
        case Error(err):
            pytest.fail(f"expected Ok, got Error({err!r})")


def err_value(result):
    match result:
        case Error(err):
            return err
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
