"""Central environment-driven settings for the payment-link service.

The process builds one `Settings` value at startup (see `get_settings`) and
hands it to the app factory. Provider adapters only ever see the
`ProviderCredentials` derived from it.
"""

from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderCredentials(BaseModel):
    """Secret + base URL for one external processor."""

    secret: str = ""
    base_url: str

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        state = "set" if self.secret else "unset"
        return f"ProviderCredentials(base_url={self.base_url!r}, secret=<{state}>)"

    __str__ = __repr__


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "paylink"
    log_level: str = "INFO"
    base_url: str = "http://localhost:8000"
    auth_password: str = ""
    tilopay_base_url: str = "https://api.tilopay.com/v1"
    tilopay_public_key: str = ""
    tilopay_secret_key: str = ""
    onvo_base_url: str = "https://api.onvopay.com/v1"
    onvo_publishable_key: str = ""
    onvo_secret_key: str = ""
    http_timeout_seconds: float = 10.0
    otel_exporter_otlp_endpoint: str = ""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def tilopay_credentials(self) -> ProviderCredentials:
        return ProviderCredentials(secret=self.tilopay_secret_key, base_url=self.tilopay_base_url)

    def onvo_credentials(self) -> ProviderCredentials:
        return ProviderCredentials(secret=self.onvo_secret_key, base_url=self.onvo_base_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""

    return Settings()


def onvo_mode(settings: Settings) -> str:
    """Report whether the ONVO keys point at the test or live environment."""

    if "_test_" in settings.onvo_publishable_key:
        return "test"
    if "_live_" in settings.onvo_publishable_key:
        return "live"
    return "unset"


def validate_provider_config(settings: Settings, provider: str) -> list[str]:
    """Return human-readable configuration problems for one provider."""

    errors: list[str] = []
    if provider == "tilopay":
        if not settings.tilopay_public_key:
            errors.append("TILOPAY_PUBLIC_KEY is required")
        if not settings.tilopay_secret_key:
            errors.append("TILOPAY_SECRET_KEY is required")
    elif provider == "onvo":
        if not settings.onvo_publishable_key:
            errors.append("ONVO_PUBLISHABLE_KEY is required")
        if not settings.onvo_secret_key:
            errors.append("ONVO_SECRET_KEY is required")
        # Keys from different environments are rejected by ONVO at call time.
        if settings.onvo_publishable_key and settings.onvo_secret_key:
            publishable_is_test = "_test_" in settings.onvo_publishable_key
            secret_is_test = "_test_" in settings.onvo_secret_key
            if publishable_is_test != secret_is_test:
                errors.append("ONVO keys must be from the same environment (both test or both live)")
    else:
        raise ValueError(f"unknown provider: {provider}")
    return errors
