"""Classified failures for payment link generation.

Every failure that leaves the orchestrator is one of these. `kind` is stable
and safe to branch on; `message` is human readable and safe to show callers.
"""


class PaymentLinkError(Exception):
    """Base class for classified payment link failures."""

    kind = "unexpected"
    response_status = 500

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        provider_code: str | int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.provider_code = provider_code

    def to_dict(self) -> dict:
        data: dict = {"kind": self.kind, "message": self.message}
        if self.http_status is not None:
            data["http_status"] = self.http_status
        if self.provider_code is not None:
            data["provider_code"] = self.provider_code
        return data


class ValidationError(PaymentLinkError):
    """Caller input is malformed. Raised before any network activity."""

    kind = "validation"
    response_status = 400


class ProviderConfigError(PaymentLinkError):
    """Deployment is missing a provider credential."""

    kind = "provider_config"
    response_status = 500


class ProviderNetworkError(PaymentLinkError):
    """The processor could not be reached (DNS, connect, timeout)."""

    kind = "provider_network"
    response_status = 502


class ProviderApiError(PaymentLinkError):
    """The processor rejected the call or answered with an unusable body."""

    kind = "provider_api"
    response_status = 502


class UnexpectedError(PaymentLinkError):
    """Anything that does not fit the other kinds."""

    kind = "unexpected"
    response_status = 500


def response_status_for(error: Exception) -> int:
    """Map a failure to the status code returned to the caller."""

    if isinstance(error, PaymentLinkError):
        return error.response_status
    return 500
