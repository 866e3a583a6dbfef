"""
Checkout — form, order submission state machine, admin notification.

    from storefront.checkout import CheckoutSession, CheckoutPhase

    session = CheckoutSession(api, cart, history, navigator)
    await session.load()
    result = await session.submit()
    session.phase            # CheckoutPhase.SUCCESS
    await session.wait_for_notification()
"""

from __future__ import annotations

from storefront.checkout._form import (
    PHONE_PATTERN,
    CheckoutForm,
    is_valid_phone,
    validate_form,
)
from storefront.checkout._state import CheckoutPhase, NotifyPhase
from storefront.checkout._session import CheckoutSession

__all__ = (
    "PHONE_PATTERN",
    "CheckoutForm",
    "is_valid_phone",
    "validate_form",
    "CheckoutPhase",
    "NotifyPhase",
    "CheckoutSession",
)
