# src/regstack/core/security/secret_validator.py
"""Fetch a secret and check it carries the keys its use requires.

Required keys come in two shapes, chosen explicitly by the caller:

- RequiredKeys.named({"superuser-username": "Username", ...}): only the
  mapping's keys are required, labels are for humans
- RequiredKeys.ordered(["accessKey", "secretKey"]): a plain key list

The validator branches on the RequiredKeys tag, never on the runtime type
of whatever the caller built it from.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from regstack.contracts.enums import RequiredKeysShape
from regstack.contracts.errors import MissingSecretKeyError, SecretNotFoundError, SecretRetrievalError
from regstack.core.security.secret_store import SecretPayload, SecretStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RequiredKeys:
    """Tagged set of keys a secret must contain.

    Attributes:
        shape: Which form the caller declared
        keys: Required key names, in declaration order
        labels: Human labels for NAMED keys (empty for ORDERED)
    """

    shape: RequiredKeysShape
    keys: tuple[str, ...]
    labels: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def named(cls, mapping: Mapping[str, str]) -> RequiredKeys:
        """Key -> label mapping; only the keys are required."""
        return cls(shape=RequiredKeysShape.NAMED, keys=tuple(mapping), labels=dict(mapping))

    @classmethod
    def ordered(cls, keys: Iterable[str]) -> RequiredKeys:
        """Plain ordered list of required keys."""
        return cls(shape=RequiredKeysShape.ORDERED, keys=tuple(keys))

    @classmethod
    def none(cls) -> RequiredKeys:
        """Existence check only."""
        return cls(shape=RequiredKeysShape.ORDERED, keys=())

    def missing_from(self, payload: SecretPayload) -> list[str]:
        """Required keys absent from ``payload``, in declaration order."""
        if self.shape is RequiredKeysShape.NAMED:
            return [key for key in self.labels if key not in payload]
        return [key for key in self.keys if key not in payload]

    def __bool__(self) -> bool:
        return bool(self.keys)


def resolve_secret(
    store: SecretStore,
    namespace: str,
    name: str,
    required: RequiredKeys | None = None,
) -> SecretPayload:
    """Fetch a secret and verify its required keys.

    Pure read: safe to call any number of times for the same secret.

    Args:
        store: Secret store to read from
        namespace: Namespace of the secret
        name: Secret name
        required: Keys the payload must contain (None or empty: existence only)

    Returns:
        The full payload, including keys outside the required set

    Raises:
        SecretNotFoundError: If the secret does not exist (propagated as-is)
        SecretRetrievalError: For other store failures (propagated as-is)
        MissingSecretKeyError: If any required key is absent
    """
    try:
        payload = store.get(namespace, name)
    except SecretNotFoundError:
        logger.error("Secret not found", namespace=namespace, name=name)
        raise
    except SecretRetrievalError:
        logger.error("Error retrieving secret", namespace=namespace, name=name)
        raise

    if required:
        missing = required.missing_from(payload)
        if missing:
            logger.error(
                "Secret is missing required keys",
                namespace=namespace,
                name=name,
                missing_keys=missing,
            )
            raise MissingSecretKeyError(namespace, name, missing)

    return payload


def decode(payload: SecretPayload, key: str) -> str:
    """Decode a payload value as UTF-8 text.

    surrogateescape keeps non-UTF-8 bytes round-trippable instead of failing
    the pass on a binary credential.
    """
    return payload[key].decode("utf-8", errors="surrogateescape")
