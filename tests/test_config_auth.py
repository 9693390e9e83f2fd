"""Tests for provider config checks, startup redaction and session tokens."""

import pytest

from paylink.common.auth import generate_token, hash_password, safe_equal, session_is_valid, verify_password
from paylink.common.config import onvo_mode, validate_provider_config
from paylink.common.startup import _safe_env, log_provider_readiness


def test_complete_config_has_no_problems(settings):
    assert validate_provider_config(settings, "tilopay") == []
    assert validate_provider_config(settings, "onvo") == []


def test_missing_keys_are_listed(settings):
    settings.onvo_publishable_key = ""
    settings.onvo_secret_key = ""

    assert validate_provider_config(settings, "onvo") == [
        "ONVO_PUBLISHABLE_KEY is required",
        "ONVO_SECRET_KEY is required",
    ]


def test_onvo_keys_must_share_environment(settings):
    settings.onvo_publishable_key = "onvo_live_publishable"
    settings.onvo_secret_key = "onvo_test_secret"

    assert validate_provider_config(settings, "onvo") == [
        "ONVO keys must be from the same environment (both test or both live)"
    ]
    assert onvo_mode(settings) == "live"


def test_onvo_mode_unset(settings):
    settings.onvo_publishable_key = ""
    assert onvo_mode(settings) == "unset"


def test_unknown_provider_config_check(settings):
    with pytest.raises(ValueError):
        validate_provider_config(settings, "paypal")


def test_readiness_logs_problems(settings, caplog):
    settings.tilopay_secret_key = ""

    with caplog.at_level("INFO", logger="paylink"):
        problems = log_provider_readiness(settings)

    assert problems["tilopay"] == ["TILOPAY_SECRET_KEY is required"]
    assert "provider_config_incomplete" in caplog.text


def test_secret_env_values_are_redacted(monkeypatch):
    monkeypatch.setenv("ONVO_SECRET_KEY", "onvo_live_abc")
    monkeypatch.setenv("BASE_URL", "https://links.example")
    monkeypatch.delenv("AUTH_PASSWORD", raising=False)

    assert _safe_env("ONVO_SECRET_KEY") == "<redacted>"
    assert _safe_env("BASE_URL") == "https://links.example"
    assert _safe_env("AUTH_PASSWORD") == "<unset>"


def test_token_is_sha256_hex():
    assert hash_password("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert generate_token("abc") == hash_password("abc")
    assert verify_password("abc", hash_password("abc"))
    assert not verify_password("abd", hash_password("abc"))


def test_session_validation():
    token = generate_token("hunter2")

    assert session_is_valid(None, "")
    assert session_is_valid(token, "hunter2")
    assert not session_is_valid(None, "hunter2")
    assert not session_is_valid("deadbeef", "hunter2")
    assert safe_equal("a", "a") and not safe_equal("a", "ab")
