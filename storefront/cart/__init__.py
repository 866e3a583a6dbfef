"""
Cart — state holder and server sync.

    from storefront.cart import CartStore, CartSync

    cart = CartStore()
    cart.add(product_ref, 2, size="M", color="Red")
    cart.add(product_ref, 1, size="M", color="Red")   # same line, quantity 3

    await CartSync(api, cart).hydrate()               # server is the truth
"""

from __future__ import annotations

from storefront.cart._store import Snapshot, Listener, CartStore, StagedAdd
from storefront.cart._sync import CartSync

__all__ = (
    "Snapshot",
    "Listener",
    "CartStore",
    "StagedAdd",
    "CartSync",
)
