"""
Checkout states.
"""

from __future__ import annotations

from enum import Enum, auto


class CheckoutPhase(Enum):
    """
    Order submission lifecycle.

        IDLE → VALIDATING → SUBMITTING → SUCCESS
                  ↓              ↓
                 IDLE          FAILED → VALIDATING (resubmit)
    """

    IDLE = auto()
    VALIDATING = auto()
    SUBMITTING = auto()
    SUCCESS = auto()
    FAILED = auto()


class NotifyPhase(Enum):
    """
    Admin notification, started after SUCCESS.

    Never affects the order outcome.
    """

    NOT_STARTED = auto()
    NOTIFYING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


__all__ = ("CheckoutPhase", "NotifyPhase")
