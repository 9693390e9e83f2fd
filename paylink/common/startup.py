"""Startup-time helpers for safe config logging."""

import os

from paylink.common.config import Settings, onvo_mode, validate_provider_config
from paylink.common.logging import logger

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _safe_env(name: str) -> str:
    """Return env value with simple redaction for secret-like variable names."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(secret in name for secret in SECRET_MARKERS):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)


def log_provider_readiness(settings: Settings) -> dict[str, list[str]]:
    """Warn about incomplete provider configuration without blocking startup."""

    problems = {name: validate_provider_config(settings, name) for name in ("tilopay", "onvo")}
    for name, errors in problems.items():
        if errors:
            logger.warning("provider_config_incomplete provider=%s problems=%s", name, errors)
    logger.info("onvo_mode=%s", onvo_mode(settings))
    return problems
