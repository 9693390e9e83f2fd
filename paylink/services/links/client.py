"""Outbound JSON calls to payment processors with failure classification."""

import json
from time import perf_counter
from typing import Any

import httpx

from paylink.common.config import ProviderCredentials
from paylink.common.errors import ProviderApiError, ProviderConfigError, ProviderNetworkError
from paylink.common.logging import logger
from paylink.common.metrics import provider_call_duration_seconds, provider_calls_total


def _error_message(body: Any) -> tuple[str | None, str | int | None]:
    """Pull a message and provider code out of a decoded error body."""

    if not isinstance(body, dict):
        return None, None
    raw_message = body.get("message")
    if isinstance(raw_message, list):
        message = "; ".join(str(part) for part in raw_message) or None
    elif raw_message:
        message = str(raw_message)
    else:
        message = None
    if message is None and body.get("error"):
        message = str(body["error"])
    code = body.get("code")
    if code is None:
        code = body.get("apiCode")
    return message, code


class ProviderClient:
    """Bearer-authenticated POST helper bound to one processor.

    A fresh `httpx.AsyncClient` is opened per call so nothing is shared
    between concurrent orchestrations.
    """

    def __init__(
        self,
        name: str,
        display_name: str,
        credentials: ProviderCredentials,
        secret_env_var: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.name = name
        self.display_name = display_name
        self.credentials = credentials
        self.secret_env_var = secret_env_var
        self.timeout = timeout
        self.transport = transport

    def _url(self, path: str) -> str:
        return f"{self.credentials.base_url.rstrip('/')}{path}"

    async def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST `payload` to `path` and return the decoded JSON object."""

        if not self.credentials.secret:
            raise ProviderConfigError(f"{self.secret_env_var} is not configured")

        headers = {
            "Authorization": f"Bearer {self.credentials.secret}",
            "Content-Type": "application/json",
        }
        start = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self._url(path), headers=headers, json=payload)
        except httpx.TransportError as exc:
            provider_calls_total.labels(provider=self.name, path=path, outcome="network_error").inc()
            logger.warning("provider_network_error provider=%s path=%s error=%r", self.name, path, exc)
            detail = str(exc) or exc.__class__.__name__
            raise ProviderNetworkError(f"Network error contacting {self.display_name}: {detail}") from exc
        finally:
            provider_call_duration_seconds.labels(provider=self.name).observe(max(0.0, perf_counter() - start))

        if not resp.is_success:
            provider_calls_total.labels(provider=self.name, path=path, outcome="api_error").inc()
            raw_body = resp.text
            try:
                body = json.loads(raw_body)
            except ValueError:
                body = None
            message, code = _error_message(body)
            if message is None:
                message = raw_body or resp.reason_phrase or "Unknown error"
            logger.error(
                "provider_api_error provider=%s status=%s path=%s payload=%s response=%s",
                self.name,
                resp.status_code,
                path,
                json.dumps(payload),
                raw_body,
            )
            raise ProviderApiError(
                f"{self.display_name} API error ({resp.status_code}): {message}",
                http_status=resp.status_code,
                provider_code=code,
            )

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            provider_calls_total.labels(provider=self.name, path=path, outcome="malformed").inc()
            logger.error(
                "provider_malformed_response provider=%s path=%s response=%s",
                self.name,
                path,
                resp.text,
            )
            raise ProviderApiError(
                f"{self.display_name} returned a malformed response",
                http_status=resp.status_code,
            )
        provider_calls_total.labels(provider=self.name, path=path, outcome="ok").inc()
        return body
