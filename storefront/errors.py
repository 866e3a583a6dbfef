"""
Errors — client-side failure taxonomy.

Every failure is a value, never an exception crossing a call site:

    match await api.fetch_cart():
        case Ok(cart):
            ...
        case Error(e):
            show(e.message)   # already localized

ApiError classifies HTTP outcomes; DiscountError and SubmitError are the
checkout-level failures built on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Locales
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_LOCALE = "en"


class ApiErrorKind(Enum):
    """
    Classification of a failed API call.

    VALIDATION     400 — malformed or missing fields
    AUTH_REQUIRED  401, or no stored token for an authenticated call
    FORBIDDEN      403
    NOT_FOUND      404
    SERVER         5xx
    NETWORK        no response at all (transport raised)
    UNEXPECTED     any other non-2xx
    MALFORMED      2xx whose body failed boundary parsing
    """

    VALIDATION = auto()
    AUTH_REQUIRED = auto()
    FORBIDDEN = auto()
    NOT_FOUND = auto()
    SERVER = auto()
    NETWORK = auto()
    UNEXPECTED = auto()
    MALFORMED = auto()


_MESSAGES: dict[str, dict[ApiErrorKind, str]] = {
    "en": {
        ApiErrorKind.VALIDATION: "The submitted data is invalid. Please review your input.",
        ApiErrorKind.AUTH_REQUIRED: "Your session has expired or is invalid. Please log in again.",
        ApiErrorKind.FORBIDDEN: "You are not allowed to perform this action.",
        ApiErrorKind.NOT_FOUND: "The requested item was not found.",
        ApiErrorKind.SERVER: "Server error. Please try again later.",
        ApiErrorKind.NETWORK: "Check your internet connection and try again.",
        ApiErrorKind.UNEXPECTED: "Something went wrong. Please try again.",
        ApiErrorKind.MALFORMED: "The server sent an unexpected response.",
    },
    "ar": {
        ApiErrorKind.VALIDATION: "بيانات الطلب غير صحيحة. يرجى مراجعة البيانات المدخلة.",
        ApiErrorKind.AUTH_REQUIRED: "جلسة تسجيل الدخول منتهية أو غير صالحة. يرجى تسجيل الدخول مرة أخرى.",
        ApiErrorKind.FORBIDDEN: "غير مصرح بإنشاء الطلب. يرجى التحقق من الصلاحيات.",
        ApiErrorKind.NOT_FOUND: "العنصر المطلوب غير موجود.",
        ApiErrorKind.SERVER: "خطأ في الخادم. يرجى المحاولة مرة أخرى لاحقاً.",
        ApiErrorKind.NETWORK: "تحقق من اتصال الإنترنت وحاول مرة أخرى.",
        ApiErrorKind.UNEXPECTED: "حدث خطأ أثناء إرسال الطلب. يرجى المحاولة مرة أخرى.",
        ApiErrorKind.MALFORMED: "استجابة غير متوقعة من الخادم.",
    },
}


def message_for(kind: ApiErrorKind, locale: str = DEFAULT_LOCALE) -> str:
    """Localized message for an error kind; unknown locales fall back to English."""
    catalog = _MESSAGES.get(locale, _MESSAGES[DEFAULT_LOCALE])
    return catalog[kind]


class Text(Enum):
    """User-facing texts that are not tied to an HTTP outcome."""

    EMPTY_DISCOUNT_CODE = auto()
    INVALID_DISCOUNT_CODE = auto()
    MINIMUM_ORDER_NOT_MET = auto()
    DISCOUNT_SUPERSEDED = auto()
    EMPTY_CART = auto()
    ALREADY_SUBMITTING = auto()
    INVALID_FORM = auto()
    NOTIFY_FAILED = auto()
    FULL_NAME_REQUIRED = auto()
    PHONE_REQUIRED = auto()
    PHONE_INVALID = auto()
    ADDRESS_REQUIRED = auto()
    GOVERNORATE_REQUIRED = auto()
    CARD_NUMBER_REQUIRED = auto()
    EXPIRY_DATE_REQUIRED = auto()
    CVV_REQUIRED = auto()
    CARD_NAME_REQUIRED = auto()
    PRODUCT_UNAVAILABLE = auto()
    PRODUCT_HIDDEN = auto()
    LOGIN_FIRST = auto()
    PRODUCT_CODE_REQUIRED = auto()
    NO_SUCH_PRODUCT_CODE = auto()
    PROFILE_UPDATED = auto()


_TEXTS: dict[str, dict[Text, str]] = {
    "en": {
        Text.EMPTY_DISCOUNT_CODE: "Please enter a discount code",
        Text.INVALID_DISCOUNT_CODE: "The code is invalid or expired",
        Text.MINIMUM_ORDER_NOT_MET: "Order total must be at least {minimum} EGP to use this code",
        Text.DISCOUNT_SUPERSEDED: "A newer discount code was applied",
        Text.EMPTY_CART: "Your cart is empty",
        Text.ALREADY_SUBMITTING: "Your order is already being submitted",
        Text.INVALID_FORM: "Please correct the highlighted fields",
        Text.NOTIFY_FAILED: "Your order was placed, but the store could not be notified yet",
        Text.FULL_NAME_REQUIRED: "Full name is required",
        Text.PHONE_REQUIRED: "Phone number is required",
        Text.PHONE_INVALID: "Phone number is invalid",
        Text.ADDRESS_REQUIRED: "Address is required",
        Text.GOVERNORATE_REQUIRED: "Governorate is required",
        Text.CARD_NUMBER_REQUIRED: "Card number is required",
        Text.EXPIRY_DATE_REQUIRED: "Expiry date is required",
        Text.CVV_REQUIRED: "Security code is required",
        Text.CARD_NAME_REQUIRED: "Cardholder name is required",
        Text.PRODUCT_UNAVAILABLE: "This product is currently unavailable.",
        Text.PRODUCT_HIDDEN: "This product is currently not visible to the public.",
        Text.LOGIN_FIRST: "Please log in first",
        Text.PRODUCT_CODE_REQUIRED: "Please enter a product code",
        Text.NO_SUCH_PRODUCT_CODE: "No product with this code",
        Text.PROFILE_UPDATED: "Profile updated",
    },
    "ar": {
        Text.EMPTY_DISCOUNT_CODE: "يرجى إدخال كود خصم",
        Text.INVALID_DISCOUNT_CODE: "الكود غير صالح أو منتهي الصلاحية",
        Text.MINIMUM_ORDER_NOT_MET: "يجب أن يكون إجمالي الطلب {minimum} جنيه على الأقل لاستخدام هذا الكود",
        Text.DISCOUNT_SUPERSEDED: "تم تطبيق كود خصم أحدث",
        Text.EMPTY_CART: "السلة فارغة",
        Text.ALREADY_SUBMITTING: "جاري تأكيد الطلب بالفعل",
        Text.INVALID_FORM: "يرجى تصحيح الحقول المحددة",
        Text.NOTIFY_FAILED: "فشل إرسال إشعار للإدارة، تم إنشاء الطلب بنجاح",
        Text.FULL_NAME_REQUIRED: "الاسم الكامل مطلوب",
        Text.PHONE_REQUIRED: "رقم الهاتف مطلوب",
        Text.PHONE_INVALID: "رقم الهاتف غير صحيح",
        Text.ADDRESS_REQUIRED: "العنوان مطلوب",
        Text.GOVERNORATE_REQUIRED: "المحافظة مطلوبة",
        Text.CARD_NUMBER_REQUIRED: "رقم البطاقة مطلوب",
        Text.EXPIRY_DATE_REQUIRED: "تاريخ الانتهاء مطلوب",
        Text.CVV_REQUIRED: "رمز الأمان مطلوب",
        Text.CARD_NAME_REQUIRED: "اسم حامل البطاقة مطلوب",
        Text.PRODUCT_UNAVAILABLE: "المنتج غير متاح حالياً.",
        Text.PRODUCT_HIDDEN: "هذا المنتج غير مرئي للجمهور حالياً.",
        Text.LOGIN_FIRST: "يرجى تسجيل الدخول أولاً",
        Text.PRODUCT_CODE_REQUIRED: "يرجى إدخال كود المنتج",
        Text.NO_SUCH_PRODUCT_CODE: "لا يوجد منتج بهذا الكود",
        Text.PROFILE_UPDATED: "تم تحديث الملف الشخصي",
    },
}


def text_for(text: Text, locale: str = DEFAULT_LOCALE, **params: object) -> str:
    """Localized text with {placeholders} filled; unknown locales fall back to English."""
    catalog = _TEXTS.get(locale, _TEXTS[DEFAULT_LOCALE])
    template = catalog[text]
    return template.format(**params) if params else template


def classify_status(status: int) -> ApiErrorKind:
    """Map a non-2xx HTTP status onto an error kind."""
    if status == 400:
        return ApiErrorKind.VALIDATION
    if status == 401:
        return ApiErrorKind.AUTH_REQUIRED
    if status == 403:
        return ApiErrorKind.FORBIDDEN
    if status == 404:
        return ApiErrorKind.NOT_FOUND
    if 500 <= status < 600:
        return ApiErrorKind.SERVER
    return ApiErrorKind.UNEXPECTED


# ═══════════════════════════════════════════════════════════════════════════════
# ApiError
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ApiError:
    """
    A failed API call.

    status is None when no response was received (NETWORK) or the call
    was never sent (AUTH_REQUIRED with no stored token).
    detail carries the raw server text for logs, never for display.
    """

    kind: ApiErrorKind
    message: str
    status: int | None = None
    detail: str | None = None

    @property
    def is_retryable(self) -> bool:
        return self.kind in (ApiErrorKind.NETWORK, ApiErrorKind.SERVER)

    def with_message(self, message: str) -> ApiError:
        """Same error, contextual message (e.g. "no product with this code")."""
        return ApiError(self.kind, message, self.status, self.detail)

    def __str__(self) -> str:
        if self.status is None:
            return f"{self.kind.name}: {self.message}"
        return f"{self.kind.name} ({self.status}): {self.message}"


class ApiErrors:
    @staticmethod
    def from_status(status: int, detail: str | None = None, locale: str = DEFAULT_LOCALE) -> ApiError:
        kind = classify_status(status)
        return ApiError(kind, message_for(kind, locale), status, detail)

    @staticmethod
    def network(cause: Exception, locale: str = DEFAULT_LOCALE) -> ApiError:
        return ApiError(ApiErrorKind.NETWORK, message_for(ApiErrorKind.NETWORK, locale), None, str(cause))

    @staticmethod
    def no_token(locale: str = DEFAULT_LOCALE) -> ApiError:
        return ApiError(ApiErrorKind.AUTH_REQUIRED, message_for(ApiErrorKind.AUTH_REQUIRED, locale))

    @staticmethod
    def malformed(detail: str, locale: str = DEFAULT_LOCALE) -> ApiError:
        return ApiError(ApiErrorKind.MALFORMED, message_for(ApiErrorKind.MALFORMED, locale), None, detail)


# ═══════════════════════════════════════════════════════════════════════════════
# Boundary parsing
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ParseError:
    """A server payload that does not fit the internal representation."""

    entity: str
    reason: str

    def __str__(self) -> str:
        return f"{self.entity}: {self.reason}"


# ═══════════════════════════════════════════════════════════════════════════════
# Discount
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountErrorKind(Enum):
    EMPTY_CODE = auto()
    INVALID_CODE = auto()
    MINIMUM_ORDER_NOT_MET = auto()
    SUPERSEDED = auto()
    LOOKUP_FAILED = auto()


@dataclass(frozen=True, slots=True)
class DiscountError:
    kind: DiscountErrorKind
    message: str
    cause: ApiError | None = None

    def __str__(self) -> str:
        return self.message


class DiscountErrors:
    @staticmethod
    def empty_code(locale: str = DEFAULT_LOCALE) -> DiscountError:
        return DiscountError(DiscountErrorKind.EMPTY_CODE, text_for(Text.EMPTY_DISCOUNT_CODE, locale))

    @staticmethod
    def invalid_code(cause: ApiError | None = None, locale: str = DEFAULT_LOCALE) -> DiscountError:
        return DiscountError(DiscountErrorKind.INVALID_CODE, text_for(Text.INVALID_DISCOUNT_CODE, locale), cause)

    @staticmethod
    def minimum_not_met(minimum: object, locale: str = DEFAULT_LOCALE) -> DiscountError:
        return DiscountError(
            DiscountErrorKind.MINIMUM_ORDER_NOT_MET,
            text_for(Text.MINIMUM_ORDER_NOT_MET, locale, minimum=minimum),
        )

    @staticmethod
    def superseded(locale: str = DEFAULT_LOCALE) -> DiscountError:
        return DiscountError(DiscountErrorKind.SUPERSEDED, text_for(Text.DISCOUNT_SUPERSEDED, locale))

    @staticmethod
    def lookup_failed(cause: ApiError) -> DiscountError:
        return DiscountError(DiscountErrorKind.LOOKUP_FAILED, cause.message, cause)


# ═══════════════════════════════════════════════════════════════════════════════
# Submit
# ═══════════════════════════════════════════════════════════════════════════════


class SubmitErrorKind(Enum):
    EMPTY_CART = auto()
    ALREADY_SUBMITTING = auto()
    INVALID_FORM = auto()
    REQUEST_FAILED = auto()


@dataclass(frozen=True, slots=True)
class SubmitError:
    """
    Why an order was not placed.

    field_errors is populated for INVALID_FORM, cause for REQUEST_FAILED.
    """

    kind: SubmitErrorKind
    message: str
    field_errors: dict[str, str] = field(default_factory=dict[str, str])
    cause: ApiError | None = None

    def __str__(self) -> str:
        return self.message


class SubmitErrors:
    @staticmethod
    def empty_cart(locale: str = DEFAULT_LOCALE) -> SubmitError:
        return SubmitError(SubmitErrorKind.EMPTY_CART, text_for(Text.EMPTY_CART, locale))

    @staticmethod
    def already_submitting(locale: str = DEFAULT_LOCALE) -> SubmitError:
        return SubmitError(SubmitErrorKind.ALREADY_SUBMITTING, text_for(Text.ALREADY_SUBMITTING, locale))

    @staticmethod
    def invalid_form(field_errors: dict[str, str], locale: str = DEFAULT_LOCALE) -> SubmitError:
        return SubmitError(SubmitErrorKind.INVALID_FORM, text_for(Text.INVALID_FORM, locale), dict(field_errors))

    @staticmethod
    def request_failed(cause: ApiError) -> SubmitError:
        return SubmitError(SubmitErrorKind.REQUEST_FAILED, cause.message, cause=cause)


# ═══════════════════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════════════════


class ConfigError(Exception):
    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "DEFAULT_LOCALE",
    "ApiErrorKind",
    "ApiError",
    "ApiErrors",
    "message_for",
    "Text",
    "text_for",
    "classify_status",
    "ParseError",
    "DiscountErrorKind",
    "DiscountError",
    "DiscountErrors",
    "SubmitErrorKind",
    "SubmitError",
    "SubmitErrors",
    "ConfigError",
)
