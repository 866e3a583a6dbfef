"""
Checkout form — customer fields and their synchronous validation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from storefront.domain import CustomerDetails, PaymentMethod
from storefront.errors import DEFAULT_LOCALE, Text, text_for

PHONE_PATTERN = re.compile(r"^01[0-9]{9}$")

CARD_FIELDS = (
    ("card_number", Text.CARD_NUMBER_REQUIRED),
    ("expiry_date", Text.EXPIRY_DATE_REQUIRED),
    ("cvv", Text.CVV_REQUIRED),
    ("card_name", Text.CARD_NAME_REQUIRED),
)


@dataclass(slots=True)
class CheckoutForm:
    full_name: str = ""
    phone: str = ""
    address: str = ""
    governorate: str = ""
    payment_method: PaymentMethod = PaymentMethod.CASH
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    card_name: str = ""
    discount_code: str = ""

    def customer(self) -> CustomerDetails:
        return CustomerDetails(
            full_name=self.full_name.strip(),
            phone=self.phone.strip(),
            address=self.address.strip(),
            governorate=self.governorate,
        )


def is_valid_phone(phone: str) -> bool:
    """11 digits starting with 01."""
    return PHONE_PATTERN.fullmatch(phone) is not None


def validate_form(form: CheckoutForm, locale: str = DEFAULT_LOCALE) -> dict[str, str]:
    """Field name → localized message for every failing field; empty when valid."""
    errors: dict[str, str] = {}

    if not form.full_name.strip():
        errors["full_name"] = text_for(Text.FULL_NAME_REQUIRED, locale)

    if not form.phone.strip():
        errors["phone"] = text_for(Text.PHONE_REQUIRED, locale)
    elif not is_valid_phone(form.phone):
        errors["phone"] = text_for(Text.PHONE_INVALID, locale)

    if not form.address.strip():
        errors["address"] = text_for(Text.ADDRESS_REQUIRED, locale)
    if not form.governorate:
        errors["governorate"] = text_for(Text.GOVERNORATE_REQUIRED, locale)

    if form.payment_method is PaymentMethod.CARD:
        for name, text in CARD_FIELDS:
            if not getattr(form, name).strip():
                errors[name] = text_for(text, locale)

    return errors


__all__ = ("PHONE_PATTERN", "CheckoutForm", "is_valid_phone", "validate_form")
