# src/regstack/core/security/__init__.py
"""Secret access for regstack.

Exports:
- SecretStore and its adapters: where secret payloads come from
- RequiredKeys / resolve_secret: fetch-and-check used by every validation step
- secret_fingerprint: HMAC fingerprints for secret-safe summaries
"""

from regstack.core.security.fingerprint import (
    fingerprint_key_configured,
    get_fingerprint_key,
    secret_fingerprint,
)
from regstack.core.security.secret_store import (
    InMemorySecretStore,
    ManifestSecretStore,
    SecretPayload,
    SecretStore,
)
from regstack.core.security.secret_validator import (
    RequiredKeys,
    decode,
    resolve_secret,
)

__all__ = [
    # Fingerprinting
    "fingerprint_key_configured",
    "get_fingerprint_key",
    "secret_fingerprint",
    # Stores
    "InMemorySecretStore",
    "ManifestSecretStore",
    "SecretPayload",
    "SecretStore",
    # Validation
    "RequiredKeys",
    "decode",
    "resolve_secret",
]
