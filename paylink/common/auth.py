"""Password session helpers.

The session token is the hex SHA-256 of the configured password, so no
server-side storage is needed and logout only clears the cookie.
"""

import hashlib
import hmac

TOKEN_COOKIE = "pl_token"
TOKEN_MAX_AGE_SECONDS = 60 * 60 * 24 * 7


def hash_password(password: str) -> str:
    """Return the hex SHA-256 digest of a UTF-8 string."""

    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def safe_equal(a: str, b: str) -> bool:
    """Constant-time string comparison."""

    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def verify_password(plaintext: str, expected_hash: str) -> bool:
    return safe_equal(hash_password(plaintext), expected_hash)


def generate_token(password: str) -> str:
    return hash_password(password)


def session_is_valid(token: str | None, configured_password: str) -> bool:
    """True when the gate is open or the cookie carries the expected token."""

    if not configured_password:
        return True
    if not token:
        return False
    return safe_equal(token, generate_token(configured_password))
