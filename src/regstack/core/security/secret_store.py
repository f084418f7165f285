# src/regstack/core/security/secret_store.py
"""Secret store abstraction.

A secret store answers one question: what is the payload of secret
``name`` in ``namespace``? Absence and failure are different answers:

- SecretNotFoundError: the secret does not exist
- SecretRetrievalError: anything else (unreadable source, malformed content)

Validation code only ever sees these two errors, so it can classify them
without knowing the backend.

Usage:
    from regstack.core.security.secret_store import ManifestSecretStore

    store = ManifestSecretStore(Path("secrets/"), default_namespace="registry")
    payload = store.get("registry", "registry-db")
    payload["database-username"]  # b"registry"
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import structlog
import yaml

from regstack.contracts.errors import SecretNotFoundError, SecretRetrievalError

logger = structlog.get_logger(__name__)

type SecretPayload = Mapping[str, bytes]


class SecretStore(Protocol):
    """Protocol for secret store backends."""

    def get(self, namespace: str, name: str) -> SecretPayload:
        """Fetch a secret's full payload.

        Args:
            namespace: Namespace to read from
            name: Secret name

        Returns:
            Mapping of key to raw bytes, fetched atomically

        Raises:
            SecretNotFoundError: If the secret does not exist
            SecretRetrievalError: For any other failure
        """
        ...


class InMemorySecretStore:
    """Dict-backed secret store.

    Payload values may be given as str for convenience; they are stored as
    UTF-8 bytes.
    """

    def __init__(self, secrets: Mapping[tuple[str, str], Mapping[str, bytes | str]] | None = None) -> None:
        self._secrets: dict[tuple[str, str], dict[str, bytes]] = {}
        for (namespace, name), payload in (secrets or {}).items():
            self.put(namespace, name, payload)

    def put(self, namespace: str, name: str, payload: Mapping[str, bytes | str]) -> None:
        """Create or replace a secret."""
        self._secrets[(namespace, name)] = {
            key: value.encode("utf-8") if isinstance(value, str) else bytes(value) for key, value in payload.items()
        }

    def get(self, namespace: str, name: str) -> SecretPayload:
        try:
            return dict(self._secrets[(namespace, name)])
        except KeyError:
            raise SecretNotFoundError(namespace, name) from None


class ManifestSecretStore:
    """Read secrets from Kubernetes ``kind: Secret`` YAML manifests.

    ``path`` may be a single (multi-document) YAML file or a directory of
    ``*.yaml`` / ``*.yml`` files. Manifests are loaded lazily on the first
    lookup and cached for the lifetime of the store. Non-Secret documents
    are skipped.

    ``data`` values are base64-decoded; ``stringData`` values are UTF-8
    encoded and take precedence over ``data`` for the same key.
    """

    def __init__(self, path: Path, *, default_namespace: str = "default") -> None:
        self._path = path
        self._default_namespace = default_namespace
        self._index: dict[tuple[str, str], dict[str, bytes]] | None = None

    def get(self, namespace: str, name: str) -> SecretPayload:
        try:
            index = self._load()
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error("Failed to load secret manifests", path=str(self._path), error=str(e))
            raise SecretRetrievalError(namespace, name, str(e)) from e

        try:
            return dict(index[(namespace, name)])
        except KeyError:
            raise SecretNotFoundError(namespace, name) from None

    def _manifest_files(self) -> list[Path]:
        if not self._path.exists():
            raise FileNotFoundError(f"Secret manifest path not found: {self._path}")
        if self._path.is_dir():
            return sorted(p for p in self._path.iterdir() if p.suffix in (".yaml", ".yml") and p.is_file())
        return [self._path]

    def _load(self) -> dict[tuple[str, str], dict[str, bytes]]:
        if self._index is not None:
            return self._index

        index: dict[tuple[str, str], dict[str, bytes]] = {}
        for manifest in self._manifest_files():
            with manifest.open(encoding="utf-8") as f:
                documents = list(yaml.safe_load_all(f))
            for document in documents:
                if document is None:
                    continue
                if not isinstance(document, dict):
                    raise ValueError(f"{manifest.name}: expected a mapping, got {type(document).__name__}")
                if document.get("kind") != "Secret":
                    logger.debug("Skipping non-Secret document", file=manifest.name, kind=document.get("kind"))
                    continue
                key, payload = self._decode_secret(document, source=manifest.name)
                if key in index:
                    raise ValueError(f"{manifest.name}: duplicate secret {key[1]!r} in namespace {key[0]!r}")
                index[key] = payload

        logger.debug("Loaded secret manifests", path=str(self._path), secrets=len(index))
        self._index = index
        return index

    def _decode_secret(self, document: dict[str, Any], *, source: str) -> tuple[tuple[str, str], dict[str, bytes]]:
        metadata = _mapping(document, "metadata", source)
        name = metadata.get("name")
        if not name or not isinstance(name, str):
            raise ValueError(f"{source}: Secret manifest is missing metadata.name")
        namespace = metadata.get("namespace") or self._default_namespace
        if not isinstance(namespace, str):
            raise ValueError(f"{source}: metadata.namespace of secret {name!r} must be a string")

        payload: dict[str, bytes] = {}
        for key, value in _mapping(document, "data", source).items():
            _require_str(key, value, "data", source)
            try:
                payload[key] = base64.b64decode(value, validate=True)
            except binascii.Error as e:
                raise ValueError(f"{source}: key {key!r} of secret {name!r} is not valid base64") from e
        for key, value in _mapping(document, "stringData", source).items():
            _require_str(key, value, "stringData", source)
            payload[key] = value.encode("utf-8")

        return (namespace, name), payload


def _mapping(document: dict[str, Any], field: str, source: str) -> dict[Any, Any]:
    value = document.get(field)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{source}: {field} must be a mapping, got {type(value).__name__}")
    return value


def _require_str(key: Any, value: Any, field: str, source: str) -> None:
    if not isinstance(key, str) or not isinstance(value, str):
        raise ValueError(f"{source}: {field} entry {key!r} must map a string key to a string value")
