"""
Cart store — the single owned container for the current shopping session.

Line items are keyed by (product id, size, color); adding an existing key
always increments its quantity. Insertion order is preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from storefront._types import Money
from storefront.domain import CartLineItem, LineKey, ProductRef
from storefront.pricing import subtotal_of

logger = logging.getLogger(__name__)

type Snapshot = tuple[CartLineItem, ...]
type Listener = Callable[[Snapshot], None]


class CartStore:
    """
    In-memory cart with command methods and a read-only snapshot.

    Listeners are called with the new snapshot after every mutation that
    changed something.
    """

    __slots__ = ("_lines", "_listeners")

    def __init__(self, items: Iterable[CartLineItem] = ()) -> None:
        self._lines: dict[LineKey, CartLineItem] = {}
        self._listeners: list[Listener] = []
        for item in items:
            self._merge(item)

    # ─── Reading ────────────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        return tuple(self._lines.values())

    def get(self, key: LineKey) -> CartLineItem | None:
        return self._lines.get(key)

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(item.quantity for item in self._lines.values())

    @property
    def subtotal(self) -> Money:
        return subtotal_of(self._lines.values())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ─── Commands ───────────────────────────────────────────────────────────

    def add(
        self,
        product: ProductRef,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
        images: tuple[str, ...] = (),
    ) -> CartLineItem:
        """Add or merge; returns the resulting line."""
        line = self._merge(CartLineItem(product, quantity, size, color, images))
        self._notify()
        return line

    def set_cart(self, items: Iterable[CartLineItem]) -> None:
        """Replace everything, e.g. with the server's cart."""
        self._lines = {}
        for item in items:
            self._merge(item)
        self._notify()

    def clear(self) -> None:
        if not self._lines:
            return
        self._lines = {}
        self._notify()

    def remove(self, key: LineKey) -> bool:
        if self._lines.pop(key, None) is None:
            return False
        self._notify()
        return True

    def update_quantity(self, key: LineKey, quantity: int) -> CartLineItem | None:
        """Set a line's quantity; 0 or less removes it. Returns the line, if kept."""
        current = self._lines.get(key)
        if current is None:
            return None
        if quantity <= 0:
            self.remove(key)
            return None
        line = replace(current, quantity=quantity)
        self._lines[key] = line
        self._notify()
        return line

    def increment(self, key: LineKey, by: int = 1) -> CartLineItem | None:
        current = self._lines.get(key)
        if current is None:
            return None
        return self.update_quantity(key, current.quantity + by)

    def decrement(self, key: LineKey, by: int = 1) -> CartLineItem | None:
        current = self._lines.get(key)
        if current is None:
            return None
        return self.update_quantity(key, current.quantity - by)

    def stage_add(
        self,
        product: ProductRef,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
        images: tuple[str, ...] = (),
    ) -> StagedAdd:
        """
        Optimistic add, to be rolled back if the server refuses it.

            staged = cart.stage_add(product, 2, "M", "Red")
            if server_failed:
                staged.rollback()
        """
        line = self.add(product, quantity, size, color, images)
        return StagedAdd(self, line.key, quantity)

    # ─── Internals ──────────────────────────────────────────────────────────

    def _merge(self, item: CartLineItem) -> CartLineItem:
        existing = self._lines.get(item.key)
        if existing is None:
            self._lines[item.key] = item
            return item
        merged = replace(
            existing,
            quantity=existing.quantity + item.quantity,
            images=existing.images or item.images,
            line_id=existing.line_id or item.line_id,
        )
        self._lines[item.key] = merged
        return merged

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)


@dataclass(slots=True)
class StagedAdd:
    """Handle for an optimistic add. rollback() is idempotent."""

    cart: CartStore
    key: LineKey
    quantity: int
    rolled_back: bool = False

    def rollback(self) -> None:
        if self.rolled_back:
            return
        self.rolled_back = True
        logger.info("Rolling back staged add of %d x %s", self.quantity, self.key[0])
        self.cart.decrement(self.key, self.quantity)


__all__ = ("Snapshot", "Listener", "CartStore", "StagedAdd")
