"""Request/response models for payment link generation."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Currency(str, Enum):
    USD = "USD"
    CRC = "CRC"


class PaymentType(str, Enum):
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class Interval(str, Enum):
    MONTH = "month"
    YEAR = "year"


class ProviderName(str, Enum):
    TILOPAY = "tilopay"
    ONVO = "onvo"


class NormalizedPaymentRequest(BaseModel):
    """Validated request with the amount expressed in minor currency units."""

    model_config = ConfigDict(frozen=True)

    amount_minor: int
    currency: Currency
    payment_type: PaymentType
    interval: Interval | None = None
    description: str | None = None
    success_url: str
    cancel_url: str


class PaymentLinkResult(BaseModel):
    """Hosted checkout URL returned by every provider."""

    url: str


class ErrorResponse(BaseModel):
    error: str


class TilopayLinkResponse(BaseModel):
    success: bool
    url: str | None = None
    error: str | None = None
