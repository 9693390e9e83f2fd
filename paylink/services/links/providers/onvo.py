"""ONVO: checkout links built from a chain of dependent resources.

Amounts are sent in centavos/céntimos (USD 10.00 -> 1000, CRC 2100.89 -> 210089).

One-time:  product -> one-time price -> payment intent -> checkout session
Recurring: customer -> product -> recurring price -> subscription -> checkout session

Each step needs the id produced by an earlier one, so the calls run strictly
in order and the first failure aborts the chain. Resources created before a
failing step are left on the ONVO side; nothing is rolled back.
"""

from typing import Any

from paylink.common.logging import logger
from paylink.services.links.client import ProviderClient
from paylink.services.links.providers.base import PaymentLinkProvider, require_field
from paylink.services.links.schemas import Interval, NormalizedPaymentRequest, PaymentLinkResult

ONE_TIME_PRODUCT_NAME = "Payment"
SUBSCRIPTION_PRODUCT_NAME = "Subscription"


class OnvoProvider(PaymentLinkProvider):
    name = "onvo"

    def __init__(self, client: ProviderClient) -> None:
        self.client = client

    async def _create(self, path: str, payload: dict[str, Any]) -> str:
        body = await self.client.post(path, payload)
        resource_id = require_field(body, "id", self.client.display_name)
        logger.info("onvo_resource_created path=%s id=%s", path, resource_id)
        return resource_id

    async def _create_customer(self) -> str:
        return await self._create("/customers", {})

    async def _create_product(self, description: str | None, default_name: str) -> str:
        return await self._create(
            "/products",
            {"name": description or default_name, "isActive": True, "isShippable": False},
        )

    async def _create_price(
        self,
        product_id: str,
        request: NormalizedPaymentRequest,
        interval: Interval | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "productId": product_id,
            "unitAmount": request.amount_minor,
            "currency": request.currency.value,
            "isActive": True,
        }
        if interval is None:
            payload["type"] = "one_time"
        else:
            payload["type"] = "recurring"
            payload["recurring"] = {"interval": interval.value, "intervalCount": 1}
        return await self._create("/prices", payload)

    async def _create_payment_intent(self, request: NormalizedPaymentRequest) -> str:
        payload: dict[str, Any] = {
            "amount": request.amount_minor,
            "currency": request.currency.value,
            "captureMethod": "automatic",
        }
        if request.description:
            payload["description"] = request.description
        return await self._create("/payment-intents", payload)

    async def _create_subscription(self, customer_id: str, price_id: str) -> str:
        # Payment is collected by the checkout session, not here.
        return await self._create(
            "/subscriptions",
            {
                "customerId": customer_id,
                "paymentBehavior": "allow_incomplete",
                "items": [{"priceId": price_id, "quantity": 1}],
            },
        )

    async def _create_checkout_session(self, price_id: str, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        body = await self.client.post(
            "/checkout/sessions/one-time-link",
            {
                "lineItems": [{"priceId": price_id, "quantity": 1}],
                "redirectUrl": request.success_url,
                "cancelUrl": request.cancel_url,
            },
        )
        return PaymentLinkResult(url=require_field(body, "url", self.client.display_name))

    async def create_one_time_payment_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        product_id = await self._create_product(request.description, ONE_TIME_PRODUCT_NAME)
        price_id = await self._create_price(product_id, request)
        # The intent id is not referenced later; ONVO still needs it to exist.
        await self._create_payment_intent(request)
        return await self._create_checkout_session(price_id, request)

    async def create_subscription_link(self, request: NormalizedPaymentRequest) -> PaymentLinkResult:
        if request.interval is None:
            raise ValueError("recurring request without interval")
        customer_id = await self._create_customer()
        product_id = await self._create_product(request.description, SUBSCRIPTION_PRODUCT_NAME)
        price_id = await self._create_price(product_id, request, request.interval)
        await self._create_subscription(customer_id, price_id)
        return await self._create_checkout_session(price_id, request)
