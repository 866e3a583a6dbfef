"""
Checkout session — the state behind the checkout screen.

Loads the cart and shipping fees, resolves discount codes, validates the
form and submits the order. After a successful submission the admin
notification runs in the background; its outcome never changes the order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from combinators import parallel as C_parallel, retry as C_retry
from kungfu import Result, Ok, Error, LazyCoroResult

from storefront.api import ApiClient
from storefront.cart import CartStore, CartSync
from storefront.checkout._form import CheckoutForm, validate_form
from storefront.checkout._state import CheckoutPhase, NotifyPhase
from storefront.discount import DiscountResolver
from storefront.domain import (
    AppliedDiscount,
    CartLineItem,
    OrderLine,
    OrderRecord,
    OrderSubmission,
    ShippingFeeEntry,
)
from storefront.errors import (
    ApiError,
    ApiErrorKind,
    DiscountError,
    DiscountErrors,
    SubmitError,
    SubmitErrors,
    Text,
    message_for,
    text_for,
)
from storefront.orders import OrderHistory, build_order_record
from storefront.pricing import Totals, compute_totals, find_shipping_entry
from storefront.session import Navigator, Routes

logger = logging.getLogger(__name__)

class CheckoutSession:
    """
    One visit to the checkout screen.

        session = CheckoutSession(api, cart, history, navigator)
        await session.load()
        session.form.governorate = "Cairo"
        await session.apply_discount("SAVE10")
        match await session.submit():
            case Ok(order): ...
            case Error(e): ...
    """

    def __init__(
        self,
        api: ApiClient,
        cart: CartStore,
        history: OrderHistory,
        navigator: Navigator,
    ) -> None:
        self._api = api
        self._cart = cart
        self._history = history
        self._navigator = navigator
        self._locale = api.settings.locale
        self._sync = CartSync(api, cart)
        self._resolver = DiscountResolver(api)

        self.form = CheckoutForm()
        self.phase = CheckoutPhase.IDLE
        self.notify_phase = NotifyPhase.NOT_STARTED
        self.shipping_fees: tuple[ShippingFeeEntry, ...] = ()
        self.discount: AppliedDiscount | None = None
        self.last_order: OrderRecord | None = None

        self.loading_cart = False
        self.loading_shipping_fees = False
        self.loading_discount = False
        self.is_submitting = False

        self.cart_error: str | None = None
        self.shipping_error: str | None = None
        self.discount_error: str | None = None
        self.submit_error: str | None = None
        self.notification_warning: str | None = None
        self.field_errors: dict[str, str] = {}

        self._discount_generation = 0
        self._discount_pending = 0
        self._notify_task: asyncio.Task[None] | None = None

    # ═══════════════════════════════════════════════════════════════════════════
    # Derived state
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self._cart.snapshot()

    @property
    def totals(self) -> Totals:
        descriptor = self.discount.descriptor if self.discount is not None else None
        return compute_totals(self._cart.snapshot(), self.shipping_fees, self.form.governorate, descriptor)

    @property
    def selected_shipping(self) -> ShippingFeeEntry | None:
        return find_shipping_entry(self.shipping_fees, self.form.governorate)

    @property
    def governorates(self) -> tuple[str, ...]:
        return tuple(entry.governorate for entry in self.shipping_fees)

    @property
    def notify_task(self) -> asyncio.Task[None] | None:
        return self._notify_task

    # ═══════════════════════════════════════════════════════════════════════════
    # Load
    # ═══════════════════════════════════════════════════════════════════════════

    async def load(self) -> None:
        """Fetch the cart and every shipping fee page concurrently."""
        if not self._api.has_session:
            self.cart_error = message_for(ApiErrorKind.AUTH_REQUIRED, self._locale)
            self._navigator.go(Routes.LOGIN)
            return
        await C_parallel(
            LazyCoroResult(self._load_cart),
            LazyCoroResult(self._load_shipping_fees),
        )

    async def _load_cart(self) -> Result[None, Any]:
        with self._flag("loading_cart"):
            self.cart_error = None
            match await self._sync.hydrate():
                case Ok(server_cart):
                    if not server_cart.items:
                        self.cart_error = text_for(Text.EMPTY_CART, self._locale)
                case Error(err):
                    self.cart_error = err.message
        return Ok(None)

    async def _load_shipping_fees(self) -> Result[None, Any]:
        with self._flag("loading_shipping_fees"):
            self.shipping_error = None
            match await self._api.fetch_all_shipping_fees():
                case Ok(fees):
                    self.shipping_fees = fees
                    logger.info("Loaded %d shipping fee entries", len(fees))
                case Error(err):
                    self.shipping_error = err.message
        return Ok(None)

    @contextmanager
    def _flag(self, name: str) -> Iterator[None]:
        setattr(self, name, True)
        try:
            yield
        finally:
            setattr(self, name, False)

    # ═══════════════════════════════════════════════════════════════════════════
    # Form
    # ═══════════════════════════════════════════════════════════════════════════

    def set_field(self, name: str, value: Any) -> None:
        """Update one form field and clear its error."""
        if not hasattr(self.form, name):
            raise AttributeError(f"CheckoutForm has no field {name!r}")
        setattr(self.form, name, value)
        self.field_errors.pop(name, None)

    # ═══════════════════════════════════════════════════════════════════════════
    # Discount
    # ═══════════════════════════════════════════════════════════════════════════

    async def apply_discount(self, code: str | None = None) -> Result[AppliedDiscount, DiscountError]:
        """
        Resolve a code against the current subtotal.

        Each call supersedes any lookup still in flight: only the latest
        call may set discount or discount_error.
        """
        if code is not None:
            self.form.discount_code = code
        code = self.form.discount_code.strip()

        self._discount_generation += 1
        generation = self._discount_generation
        self.discount = None
        self.discount_error = None

        if not code:
            err = DiscountErrors.empty_code(self._locale)
            self.discount_error = err.message
            return Error(err)

        self._discount_pending += 1
        self.loading_discount = True
        try:
            result = await self._resolver.resolve(code, self._cart.subtotal)
        finally:
            self._discount_pending -= 1
            self.loading_discount = self._discount_pending > 0

        if generation != self._discount_generation:
            logger.debug("Discount lookup for %r superseded", code)
            return Error(DiscountErrors.superseded(self._locale))

        match result:
            case Ok(applied):
                self.discount = applied
            case Error(err):
                self.discount_error = err.message
        return result

    def clear_discount(self) -> None:
        self._discount_generation += 1
        self.discount = None
        self.discount_error = None
        self.form.discount_code = ""

    # ═══════════════════════════════════════════════════════════════════════════
    # Submit
    # ═══════════════════════════════════════════════════════════════════════════

    async def submit(self) -> Result[OrderRecord, SubmitError]:
        """
        Validate, POST the order, and on success record it, clear the
        cart and go home. The admin notification starts afterwards.
        """
        if self.is_submitting:
            return Error(SubmitErrors.already_submitting(self._locale))

        snapshot = self._cart.snapshot()
        if not snapshot:
            err = SubmitErrors.empty_cart(self._locale)
            self.submit_error = err.message
            return Error(err)

        self.phase = CheckoutPhase.VALIDATING
        self.field_errors = validate_form(self.form, self._locale)
        if self.field_errors:
            self.phase = CheckoutPhase.IDLE
            return Error(SubmitErrors.invalid_form(self.field_errors, self._locale))

        discount = self.discount
        submission = OrderSubmission(
            customer=self.form.customer(),
            payment_method=self.form.payment_method,
            lines=tuple(OrderLine.from_cart(item) for item in snapshot),
            discount_code=discount.code if discount is not None else None,
        )
        totals = compute_totals(
            snapshot,
            self.shipping_fees,
            self.form.governorate,
            discount.descriptor if discount is not None else None,
        )

        self.phase = CheckoutPhase.SUBMITTING
        self.submit_error = None
        self.notification_warning = None
        with self._flag("is_submitting"):
            result = await self._api.create_order(submission)

        match result:
            case Error(err):
                self.phase = CheckoutPhase.FAILED
                self.submit_error = err.message
                self._redirect_if_signed_out(err)
                logger.error("Order submission failed: %s", err)
                return Error(SubmitErrors.request_failed(err))
            case Ok(created):
                record = build_order_record(created, submission, totals)

        self._history.add(record)
        self.last_order = record
        self._cart.clear()
        self.clear_discount()
        self.phase = CheckoutPhase.SUCCESS
        logger.info("Order %s placed, total %s", record.id, record.total)

        self._navigator.go(Routes.HOME, replace=True)
        self._notify_task = asyncio.create_task(self._notify_admin(record))
        return Ok(record)

    def _redirect_if_signed_out(self, err: ApiError) -> None:
        # A 401 is handled by the client's session guard; this covers a call
        # that was never sent because no token was stored.
        if err.kind is ApiErrorKind.AUTH_REQUIRED and err.status is None:
            self._navigator.go(Routes.LOGIN, replace=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # Admin notification
    # ═══════════════════════════════════════════════════════════════════════════

    async def _notify_admin(self, record: OrderRecord) -> None:
        self.notify_phase = NotifyPhase.NOTIFYING
        result = await C_retry(
            self._api.notify_admin(record.id, record.total),
            policy=self._api.settings.notify_retry,
        )
        match result:
            case Ok(_):
                self.notify_phase = NotifyPhase.SUCCEEDED
                logger.info("Admin notified of order %s", record.id)
            case Error(err):
                self.notify_phase = NotifyPhase.FAILED
                self.notification_warning = text_for(Text.NOTIFY_FAILED, self._locale)
                logger.error("Admin notification for order %s failed: %s", record.id, err)

    async def wait_for_notification(self) -> NotifyPhase:
        """Await the background notification, if one was started."""
        if self._notify_task is not None:
            await self._notify_task
        return self.notify_phase


__all__ = ("CheckoutSession",)
