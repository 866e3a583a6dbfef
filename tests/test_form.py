"""Tests for checkout form validation."""

import pytest

from storefront.checkout import CheckoutForm, is_valid_phone, validate_form
from storefront.domain import PaymentMethod


def valid_form(**overrides):
    form = CheckoutForm(
        full_name="Mona Adel",
        phone="01012345678",
        address="12 Nile St",
        governorate="Cairo",
    )
    for name, value in overrides.items():
        setattr(form, name, value)
    return form


class TestPhone:
    @pytest.mark.parametrize("phone", ["01012345678", "01100000000", "01999999999"])
    def test_accepts_eleven_digits_starting_with_01(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize(
        "phone",
        [
            "0101234567",
            "010123456789",
            "11012345678",
            "02012345678",
            "0101234567a",
            "+201012345678",
            " 01012345678",
            "01012345678\n",
            "",
        ],
    )
    def test_rejects_anything_else(self, phone):
        assert not is_valid_phone(phone)


class TestValidateForm:
    def test_valid_cash_form(self):
        assert validate_form(valid_form()) == {}

    def test_empty_form_reports_every_field(self):
        errors = validate_form(CheckoutForm())
        assert set(errors) == {"full_name", "phone", "address", "governorate"}

    def test_whitespace_is_empty(self):
        errors = validate_form(valid_form(full_name="   ", address="\t"))
        assert set(errors) == {"full_name", "address"}

    def test_invalid_phone_message_differs_from_missing(self):
        missing = validate_form(valid_form(phone=""))["phone"]
        invalid = validate_form(valid_form(phone="12345"))["phone"]
        assert missing != invalid

    def test_card_payment_requires_card_fields(self):
        errors = validate_form(valid_form(payment_method=PaymentMethod.CARD))
        assert set(errors) == {"card_number", "expiry_date", "cvv", "card_name"}

    def test_card_fields_ignored_for_cash(self):
        assert validate_form(valid_form(payment_method=PaymentMethod.CASH, cvv="")) == {}

    def test_complete_card_form(self):
        form = valid_form(
            payment_method=PaymentMethod.CARD,
            card_number="4111111111111111",
            expiry_date="12/29",
            cvv="123",
            card_name="MONA ADEL",
        )
        assert validate_form(form) == {}

    def test_arabic_messages(self):
        errors = validate_form(CheckoutForm(phone="123", payment_method=PaymentMethod.CARD), "ar")

        assert errors == {
            "full_name": "الاسم الكامل مطلوب",
            "phone": "رقم الهاتف غير صحيح",
            "address": "العنوان مطلوب",
            "governorate": "المحافظة مطلوبة",
            "card_number": "رقم البطاقة مطلوب",
            "expiry_date": "تاريخ الانتهاء مطلوب",
            "cvv": "رمز الأمان مطلوب",
            "card_name": "اسم حامل البطاقة مطلوب",
        }

    def test_unknown_locale_falls_back_to_english(self):
        assert validate_form(valid_form(full_name=""), "fr") == {"full_name": "Full name is required"}
