"""TiloPay: one call per operation, the response carries the checkout URL."""

from typing import Any

from paylink.services.links.client import ProviderClient
from paylink.services.links.providers.base import PaymentLinkProvider, require_field
from paylink.services.links.schemas import NormalizedPaymentRequest, PaymentLinkResult


class TilopayProvider(PaymentLinkProvider):
    name = "tilopay"

    def __init__(self, client: ProviderClient) -> None:
        self.client = client

    def _payload(self, request: NormalizedPaymentRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "amount": request.amount_minor,
            "currency": request.currency.value,
        }
        if request.interval is not None:
            payload["interval"] = request.interval.value
        if request.description:
            payload["description"] = request.description
        payload["success_url"] = request.success_url
        payload["cancel_url"] = request.cancel_url
        return payload

    async def _create(self, path: str, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        body = await self.client.post(path, self._payload(request))
        return PaymentLinkResult(url=require_field(body, "url", self.client.display_name))

    async def create_one_time_payment_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        return await self._create("/payment_intents", request)

    async def create_subscription_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        return await self._create("/subscriptions", request)
