"""
storefront — cart and checkout client for the clothing store API.

    from storefront import cart, checkout, session
    from storefront import retry as R

    settings = Settings.from_env()
    async with ApiClient(settings, tokens, guard) as api:
        session = CheckoutSession(api, CartStore(), OrderHistory(), navigator)
        await session.load()
"""

from storefront import cart
from storefront import checkout
from storefront import retry
from storefront import session
from storefront._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Money,
)
from storefront.config import Settings
from storefront.api import ApiClient
from storefront.cart import CartStore, CartSync
from storefront.checkout import CheckoutSession
from storefront.orders import OrderHistory
from storefront.auth import AuthService
from storefront.catalog import CatalogService
from storefront.account import AccountService

__version__ = "0.1.0"

__all__ = (
    "cart",
    "checkout",
    "retry",
    "session",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Money",
    "Settings",
    "ApiClient",
    "CartStore",
    "CartSync",
    "CheckoutSession",
    "OrderHistory",
    "AuthService",
    "CatalogService",
    "AccountService",
)
