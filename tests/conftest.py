"""Shared fixtures: settings and a recording fake of the processors' HTTP APIs."""

import json

import httpx
import pytest

from paylink.common.config import Settings

TILOPAY_BASE = "https://api.tilopay.test/v1"
ONVO_BASE = "https://api.onvo.test/v1"


class ProviderStub:
    """Records every outbound call and answers from a per-path routing table.

    Routes map a path suffix (e.g. "/prices") to either an `httpx.Response`
    or a callable taking the request and returning one (or raising).
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[dict] = []

    def _route(self, request: httpx.Request):
        for suffix, answer in self.routes.items():
            if request.url.path.endswith(suffix):
                return answer
        return httpx.Response(404, json={"message": f"no route for {request.url.path}"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(
            {
                "host": request.url.host,
                "path": request.url.path,
                "json": json.loads(request.content) if request.content else None,
                "authorization": request.headers.get("authorization"),
            }
        )
        answer = self._route(request)
        if callable(answer):
            return answer(request)
        # Fresh copy so one canned answer can serve repeated calls.
        return httpx.Response(answer.status_code, headers=answer.headers, content=answer.content)

    @property
    def paths(self) -> list[str]:
        return [call["path"] for call in self.calls]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        service_name="paylink-test",
        base_url="http://localhost:3000",
        auth_password="",
        tilopay_base_url=TILOPAY_BASE,
        tilopay_public_key="tp_public",
        tilopay_secret_key="tp_secret",
        onvo_base_url=ONVO_BASE,
        onvo_publishable_key="onvo_test_publishable",
        onvo_secret_key="onvo_test_secret",
        otel_exporter_otlp_endpoint="",
    )


@pytest.fixture
def onvo_routes() -> dict:
    """Happy-path answers for every ONVO resource."""

    return {
        "/customers": httpx.Response(201, json={"id": "cus_1"}),
        "/products": httpx.Response(201, json={"id": "prod_1"}),
        "/prices": httpx.Response(201, json={"id": "price_1"}),
        "/payment-intents": httpx.Response(201, json={"id": "pi_1", "status": "requires_payment_method"}),
        "/subscriptions": httpx.Response(201, json={"id": "sub_1"}),
        "/checkout/sessions/one-time-link": httpx.Response(
            201, json={"id": "cs_1", "url": "https://checkout.onvopay.com/cs_1"}
        ),
    }


@pytest.fixture
def valid_raw() -> dict:
    return {
        "amount": 10.00,
        "currency": "USD",
        "type": "one_time",
        "description": "Consulting hour",
        "success_url": "https://shop.example/success",
        "cancel_url": "https://shop.example/cancel",
    }
