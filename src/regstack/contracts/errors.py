# src/regstack/contracts/errors.py
"""Error taxonomy for a validation pass.

Every failure a pass can produce derives from RegstackError and carries a
stable ``kind`` string so callers (the CLI, a reconciler) can branch on it
without matching message text. Errors are terminal: nothing in regstack
retries them.
"""

from __future__ import annotations

from collections.abc import Iterable


class RegstackError(Exception):
    """Base class for all validation pass failures."""

    kind: str = "error"


class SecretNotFoundError(RegstackError):
    """Raised when a referenced secret does not exist.

    Attributes:
        namespace: Namespace that was searched
        name: Secret name that was requested
    """

    kind = "not_found"

    def __init__(self, namespace: str, name: str, message: str | None = None) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(message or f"Secret not found. Namespace: {namespace}, Name: {name}")


class SecretRetrievalError(RegstackError):
    """Raised when the secret store fails for any reason other than absence.

    Transient access failures and malformed store content land here. They are
    never reported as SecretNotFoundError.
    """

    kind = "retrieval"

    def __init__(self, namespace: str, name: str, message: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"Error retrieving secret. Namespace: {namespace}, Name: {name}: {message}")


class MissingSecretKeyError(RegstackError):
    """Raised when a secret exists but lacks keys its use requires.

    Attributes:
        namespace: Namespace of the secret
        name: Secret name
        missing_keys: Required keys absent from the payload, in declaration order
    """

    kind = "missing_key"

    def __init__(self, namespace: str, name: str, missing_keys: Iterable[str]) -> None:
        self.namespace = namespace
        self.name = name
        self.missing_keys = tuple(missing_keys)
        super().__init__(
            "Failed to validate provided secret with required parameters. "
            f"Namespace: {namespace}, Name: {name}, Missing keys: {', '.join(self.missing_keys)}"
        )


class ConfigValidationError(RegstackError):
    """Raised when a structural or semantic rule of the request is violated.

    Attributes:
        entity: The offending component or backend name, if there is one
    """

    kind = "validation"

    def __init__(self, message: str, *, entity: str | None = None) -> None:
        self.entity = entity
        super().__init__(message)


class InvalidCombinationError(ConfigValidationError):
    """Raised when two individually valid settings cannot be used together."""

    kind = "invalid_combination"


class ParseError(RegstackError, ValueError):
    """Raised when a size or duration literal is malformed.

    Attributes:
        literal: The input that failed to parse
    """

    kind = "parse"

    def __init__(self, literal: str, message: str) -> None:
        self.literal = literal
        super().__init__(message)


class QuantityParseError(ParseError):
    """Raised for malformed resource-quantity literals such as ``10Gx``."""


class DurationParseError(ParseError):
    """Raised for malformed duration literals such as ``24hours``."""
