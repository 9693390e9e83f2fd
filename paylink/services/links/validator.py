"""Validation and minor-unit normalization of raw payment link requests."""

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from paylink.common.errors import ValidationError
from paylink.services.links.schemas import Currency, Interval, NormalizedPaymentRequest, PaymentType

MAX_DESCRIPTION_LENGTH = 200
MINOR_UNITS_PER_MAJOR = 100


def _choices(enum_cls) -> str:
    return " or ".join(f'"{member.value}"' for member in enum_cls)


def to_minor_units(amount: int | float | Decimal) -> int:
    """Convert a major-unit amount to minor units, rounding half up.

    Rounds the float product `amount * 100`, so 1.005 (stored as 100.4999...)
    becomes 100 cents.
    """

    product = float(amount) * MINOR_UNITS_PER_MAJOR
    if not math.isfinite(product):
        raise OverflowError("amount out of range")
    return math.floor(product + 0.5)


def _validate_amount(raw: Any) -> int:
    # bool is an int subclass; JSON true/false is not an amount.
    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal)):
        raise ValidationError("amount must be a positive number")
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValidationError("amount must be a positive number")
    if isinstance(raw, Decimal) and not raw.is_finite():
        raise ValidationError("amount must be a positive number")
    if raw <= 0:
        raise ValidationError("amount must be a positive number")
    try:
        minor = to_minor_units(raw)
    except OverflowError:
        raise ValidationError("amount is too large") from None
    if minor <= 0:
        raise ValidationError("amount must be at least 0.01")
    return minor


def _validate_url(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.lower().startswith(("http://", "https://")):
        raise ValidationError(f"{field} must be a valid http(s) URL")
    return value


def _validate_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("description must be a string")
    value = value.strip()
    if not value:
        return None
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    return value


def validate_payment_request(raw: Mapping[str, Any]) -> NormalizedPaymentRequest:
    """Validate a raw request and re-express its amount in minor units.

    Rules are checked in a fixed order and the first failure wins: amount,
    currency, payment type, interval (recurring only), success/cancel URLs,
    then description.
    """

    amount_minor = _validate_amount(raw.get("amount"))

    currency = raw.get("currency")
    if not isinstance(currency, str) or currency not in {c.value for c in Currency}:
        raise ValidationError(f"currency must be {_choices(Currency)}")

    payment_type = raw.get("type")
    if not isinstance(payment_type, str) or payment_type not in {p.value for p in PaymentType}:
        raise ValidationError(f"type must be {_choices(PaymentType)}")

    interval = None
    if payment_type == PaymentType.RECURRING.value:
        interval = raw.get("interval")
        if not isinstance(interval, str) or interval not in {i.value for i in Interval}:
            raise ValidationError(f"interval must be {_choices(Interval)} for recurring payments")

    success_url = _validate_url(raw.get("success_url"), "success_url")
    cancel_url = _validate_url(raw.get("cancel_url"), "cancel_url")
    description = _validate_description(raw.get("description"))

    return NormalizedPaymentRequest(
        amount_minor=amount_minor,
        currency=Currency(currency),
        payment_type=PaymentType(payment_type),
        interval=Interval(interval) if interval else None,
        description=description,
        success_url=success_url,
        cancel_url=cancel_url,
    )
