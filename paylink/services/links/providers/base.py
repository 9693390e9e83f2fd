"""Provider adapter contract shared by every payment processor."""

from typing import Any, Protocol

from paylink.common.errors import ProviderApiError
from paylink.services.links.schemas import NormalizedPaymentRequest, PaymentLinkResult


class PaymentLinkProvider(Protocol):
    name: str

    async def create_one_time_payment_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult: ...

    async def create_subscription_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult: ...


def require_field(body: dict[str, Any], field: str, display_name: str) -> str:
    """Read a non-empty string field from a processor response."""

    value = body.get(field)
    if not isinstance(value, str) or not value:
        raise ProviderApiError(f"{display_name} malformed response: missing {field}")
    return value
