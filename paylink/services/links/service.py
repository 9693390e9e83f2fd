"""Payment link orchestration.

Validates the raw request, picks an adapter by provider and an operation by
payment type, and turns whatever the adapter raises into a classified error.
"""

from collections.abc import Awaitable, Callable, Mapping
from operator import attrgetter
from typing import Any

import httpx

from paylink.common.config import Settings
from paylink.common.errors import PaymentLinkError, UnexpectedError, ValidationError
from paylink.common.logging import logger, provider_ctx
from paylink.common.metrics import (
    payment_link_failure_total,
    payment_link_requests_total,
    payment_link_success_total,
)
from paylink.services.links.client import ProviderClient
from paylink.services.links.providers.base import PaymentLinkProvider
from paylink.services.links.providers.onvo import OnvoProvider
from paylink.services.links.providers.tilopay import TilopayProvider
from paylink.services.links.schemas import NormalizedPaymentRequest, PaymentLinkResult, PaymentType, ProviderName
from paylink.services.links.validator import validate_payment_request

Operation = Callable[[NormalizedPaymentRequest], Awaitable[PaymentLinkResult]]

OPERATIONS: dict[PaymentType, Callable[[PaymentLinkProvider], Operation]] = {
    PaymentType.ONE_TIME: attrgetter("create_one_time_payment_link"),
    PaymentType.RECURRING: attrgetter("create_subscription_link"),
}


def build_providers(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[ProviderName, PaymentLinkProvider]:
    """Wire both adapters from one settings value."""

    return {
        ProviderName.TILOPAY: TilopayProvider(
            ProviderClient(
                "tilopay",
                "TiloPay",
                settings.tilopay_credentials(),
                secret_env_var="TILOPAY_SECRET_KEY",
                timeout=settings.http_timeout_seconds,
                transport=transport,
            )
        ),
        ProviderName.ONVO: OnvoProvider(
            ProviderClient(
                "onvo",
                "ONVO",
                settings.onvo_credentials(),
                secret_env_var="ONVO_SECRET_KEY",
                timeout=settings.http_timeout_seconds,
                transport=transport,
            )
        ),
    }


def _label(value: Any, enum_cls) -> str:
    """Bound metric label values to known names."""

    known = {member.value for member in enum_cls}
    return value if isinstance(value, str) and value in known else "unknown"


class PaymentLinkService:
    """Stateless entry point for turning a raw request into a checkout URL."""

    def __init__(self, providers: Mapping[ProviderName, PaymentLinkProvider]) -> None:
        self.providers = dict(providers)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PaymentLinkService":
        return cls(build_providers(settings, transport))

    def _select_provider(self, provider: Any) -> PaymentLinkProvider:
        try:
            return self.providers[ProviderName(provider)]
        except (ValueError, KeyError):
            choices = " or ".join(f'"{name.value}"' for name in self.providers)
            raise ValidationError(f"provider must be {choices}") from None

    async def generate_link(self, provider: Any, payment_type: Any, raw: Mapping[str, Any]) -> PaymentLinkResult:
        """Create a hosted checkout link or raise a `PaymentLinkError`."""

        provider_label = _label(provider, ProviderName)
        token = provider_ctx.set(provider_label)
        try:
            payment_link_requests_total.labels(
                provider=provider_label,
                payment_type=_label(payment_type, PaymentType),
            ).inc()
            try:
                request = validate_payment_request({**raw, "type": payment_type})
                adapter = self._select_provider(provider)
                operation = OPERATIONS[request.payment_type](adapter)
                result = await operation(request)
            except ValidationError as exc:
                payment_link_failure_total.labels(provider=provider_label, kind=exc.kind).inc()
                logger.info("payment_link_rejected reason=%s", exc.message)
                raise
            except PaymentLinkError as exc:
                payment_link_failure_total.labels(provider=provider_label, kind=exc.kind).inc()
                logger.warning("payment_link_failed error=%s", exc.to_dict())
                raise
            except Exception as exc:
                payment_link_failure_total.labels(provider=provider_label, kind=UnexpectedError.kind).inc()
                logger.exception("payment_link_unexpected_error")
                raise UnexpectedError(str(exc) or "Unexpected error") from exc

            payment_link_success_total.labels(provider=provider_label).inc()
            logger.info(
                "payment_link_created payment_type=%s amount_minor=%s currency=%s",
                request.payment_type.value,
                request.amount_minor,
                request.currency.value,
            )
            return result
        finally:
            provider_ctx.reset(token)
