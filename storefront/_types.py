"""
Core types for storefront.

Re-exports from kungfu + money helpers.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Monetary amount in EGP. Never a float."""

ZERO: Money = Decimal("0")
CENT: Money = Decimal("0.01")


def money(value: object) -> Money:
    """
    Coerce a JSON number, string or Decimal into Money.

    Floats go through str() so 0.1 stays 0.1.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"not a monetary amount: {value!r}") from e
    else:
        raise ValueError(f"not a monetary amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"not a monetary amount: {value!r}")
    return result


def round_money(value: Money) -> Money:
    """Round to 2 decimal places, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Money) -> str:
    """Two-decimal string, as the API expects for totals."""
    return f"{round_money(value):.2f}"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Money",
    # Money helpers
    "ZERO",
    "CENT",
    "money",
    "round_money",
    "format_money",
)
