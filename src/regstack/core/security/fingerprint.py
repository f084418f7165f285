# src/regstack/core/security/fingerprint.py
"""Secret fingerprinting using HMAC-SHA256.

Resolved secret values must never be printed or logged. Summaries show a
fingerprint instead, which lets an operator confirm "the same password
was used in both passes" without revealing it.

Usage:
    from regstack.core.security import secret_fingerprint

    # With explicit key
    fp = secret_fingerprint(password, key=signing_key)

    # With environment variable (REGSTACK_FINGERPRINT_KEY)
    fp = secret_fingerprint(password)
"""

from __future__ import annotations

import hashlib
import hmac
import os

_ENV_VAR = "REGSTACK_FINGERPRINT_KEY"


def get_fingerprint_key() -> bytes:
    """Get the fingerprint key from the environment.

    Read on every call so tests and long-lived processes see changes.

    Returns:
        The fingerprint key as bytes

    Raises:
        ValueError: If REGSTACK_FINGERPRINT_KEY is not set or empty
    """
    env_key = os.environ.get(_ENV_VAR)
    if not env_key:
        raise ValueError(f"Fingerprint key not configured. Set {_ENV_VAR}.")
    return env_key.encode("utf-8")


def fingerprint_key_configured() -> bool:
    """Whether secret_fingerprint() can run without an explicit key."""
    return bool(os.environ.get(_ENV_VAR))


def secret_fingerprint(secret: str | bytes, *, key: bytes | None = None) -> str:
    """Compute HMAC-SHA256 fingerprint of a secret.

    Args:
        secret: The secret value (text or raw payload bytes)
        key: HMAC key. If not provided, reads REGSTACK_FINGERPRINT_KEY.

    Returns:
        64-character hex string (SHA256 digest)

    Raises:
        ValueError: If key is None and REGSTACK_FINGERPRINT_KEY is not set

    Example:
        >>> fp = secret_fingerprint("hunter22", key=b"my-signing-key")
        >>> len(fp)
        64
    """
    if key is None:
        key = get_fingerprint_key()

    message = secret if isinstance(secret, bytes) else secret.encode("utf-8", errors="surrogateescape")
    return hmac.new(key=key, msg=message, digestmod=hashlib.sha256).hexdigest()
