"""Tests for outbound call classification in ProviderClient."""

import httpx
import pytest

from conftest import TILOPAY_BASE, ProviderStub
from paylink.common.config import ProviderCredentials
from paylink.common.errors import ProviderApiError, ProviderConfigError, ProviderNetworkError
from paylink.services.links.client import ProviderClient


def make_client(stub: ProviderStub, secret: str = "sk_test") -> ProviderClient:
    return ProviderClient(
        "tilopay",
        "TiloPay",
        ProviderCredentials(secret=secret, base_url=TILOPAY_BASE),
        secret_env_var="TILOPAY_SECRET_KEY",
        transport=stub.transport,
    )


@pytest.mark.asyncio
async def test_post_sends_bearer_json_and_returns_body():
    stub = ProviderStub({"/things": httpx.Response(200, json={"id": "t_1"})})

    body = await make_client(stub).post("/things", {"amount": 1000})

    assert body == {"id": "t_1"}
    assert stub.calls[0]["path"] == "/v1/things"
    assert stub.calls[0]["authorization"] == "Bearer sk_test"
    assert stub.calls[0]["json"] == {"amount": 1000}


@pytest.mark.asyncio
async def test_missing_secret_fails_before_network():
    stub = ProviderStub()

    with pytest.raises(ProviderConfigError, match="TILOPAY_SECRET_KEY"):
        await make_client(stub, secret="").post("/things", {})

    assert stub.calls == []


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    stub = ProviderStub({"/things": refuse})

    with pytest.raises(ProviderNetworkError, match="connection refused"):
        await make_client(stub).post("/things", {})


@pytest.mark.asyncio
async def test_timeout_is_network_error():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    stub = ProviderStub({"/things": slow})

    with pytest.raises(ProviderNetworkError):
        await make_client(stub).post("/things", {})


@pytest.mark.asyncio
async def test_error_body_message_and_code_are_kept():
    stub = ProviderStub({"/things": httpx.Response(422, json={"message": "bad currency", "code": "E42"})})

    with pytest.raises(ProviderApiError) as excinfo:
        await make_client(stub).post("/things", {})

    assert excinfo.value.http_status == 422
    assert excinfo.value.provider_code == "E42"
    assert excinfo.value.message == "TiloPay API error (422): bad currency"


@pytest.mark.asyncio
async def test_message_arrays_are_joined_and_api_code_used():
    body = {"statusCode": 400, "apiCode": "invalid_param", "message": ["amount too low", "currency missing"]}
    stub = ProviderStub({"/things": httpx.Response(400, json=body)})

    with pytest.raises(ProviderApiError) as excinfo:
        await make_client(stub).post("/things", {})

    assert "amount too low; currency missing" in excinfo.value.message
    assert excinfo.value.provider_code == "invalid_param"


@pytest.mark.asyncio
async def test_error_field_used_when_message_absent():
    stub = ProviderStub({"/things": httpx.Response(401, json={"error": "Unauthorized key"})})

    with pytest.raises(ProviderApiError, match="Unauthorized key"):
        await make_client(stub).post("/things", {})


@pytest.mark.asyncio
async def test_unparsable_error_body_falls_back_to_text_then_reason():
    stub = ProviderStub({"/text": httpx.Response(500, text="upstream exploded"), "/empty": httpx.Response(503)})
    client = make_client(stub)

    with pytest.raises(ProviderApiError, match="upstream exploded"):
        await client.post("/text", {})
    with pytest.raises(ProviderApiError, match="Service Unavailable") as excinfo:
        await client.post("/empty", {})
    assert excinfo.value.http_status == 503


@pytest.mark.asyncio
async def test_api_error_logs_payload_but_not_secret(caplog):
    stub = ProviderStub({"/things": httpx.Response(400, json={"message": "nope"})})

    with caplog.at_level("ERROR", logger="paylink"):
        with pytest.raises(ProviderApiError):
            await make_client(stub, secret="sk_very_secret").post("/things", {"amount": 1234})

    logged = caplog.text
    assert "/things" in logged
    assert "1234" in logged
    assert "sk_very_secret" not in logged


@pytest.mark.asyncio
async def test_success_with_unparsable_body_is_malformed():
    stub = ProviderStub({"/things": httpx.Response(200, text="<html>ok</html>")})

    with pytest.raises(ProviderApiError, match="malformed response"):
        await make_client(stub).post("/things", {})


def test_credentials_repr_hides_secret():
    creds = ProviderCredentials(secret="sk_very_secret", base_url=TILOPAY_BASE)
    assert "sk_very_secret" not in repr(creds)
    assert "sk_very_secret" not in str(creds)
