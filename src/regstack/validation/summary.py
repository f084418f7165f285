# src/regstack/validation/summary.py
"""Secret-safe summary of a resolved configuration.

summarize() returns plain JSON-serializable data. Every secret-derived
value is replaced by its HMAC fingerprint when REGSTACK_FINGERPRINT_KEY is
set, and by REDACTED otherwise. Raw secret values never appear.
"""

from __future__ import annotations

from typing import Any

from regstack.contracts.resolved import (
    ConfigFileEntry,
    DatabaseCredentials,
    ResolvedConfiguration,
    ResolvedRegistryBackend,
)
from regstack.core.quantity import Quantity
from regstack.core.security.fingerprint import fingerprint_key_configured, secret_fingerprint

REDACTED = "<redacted>"

# Storage fields that may hold credentials, inline or projected from a secret
SECRET_STORAGE_FIELDS = frozenset({"access_key", "secret_key", "account_key", "sas_token", "password", "temp_url_key"})


def _mask(value: str | bytes | None) -> str | None:
    if value is None:
        return None
    if fingerprint_key_configured():
        return secret_fingerprint(value)
    return REDACTED


def _quantity(value: Quantity | None) -> str | None:
    return None if value is None else str(value)


def _database(credentials: DatabaseCredentials) -> dict[str, Any]:
    return {
        "username": credentials.username,
        "password": _mask(credentials.password),
        "database": credentials.database,
        "server": credentials.server,
        "root_password": _mask(credentials.root_password),
    }


def _backend(backend: ResolvedRegistryBackend) -> dict[str, Any]:
    storage = backend.storage.model_dump(mode="json")
    for name in storage.keys() & SECRET_STORAGE_FIELDS:
        storage[name] = _mask(storage[name])

    credentials = backend.credentials
    return {
        "name": backend.name,
        "kind": backend.kind.value,
        "storage": storage,
        "credentials": None
        if credentials is None
        else {
            "source": credentials.source.value,
            "secret_name": credentials.secret_name,
            "keys": list(credentials.keys),
        },
    }


def _config_file(entry: ConfigFileEntry) -> dict[str, Any]:
    return {
        "type": entry.type.value,
        "key": entry.key,
        "filename": entry.filename,
        "size": len(entry.content),
        "content": _mask(entry.content),
    }


def summarize(resolved: ResolvedConfiguration) -> dict[str, Any]:
    """Render a resolved configuration for display or JSON output.

    Args:
        resolved: Output of a successful validation pass

    Returns:
        Nested dict of JSON-compatible values with secrets masked
    """
    interval = resolved.scanner_update_interval
    return {
        "namespace": resolved.namespace,
        "superuser": {
            "username": resolved.superuser.username,
            "email": resolved.superuser.email,
            "password": _mask(resolved.superuser.password),
            "from_secret": resolved.superuser_from_secret,
        },
        "config_app": {
            "password": _mask(resolved.config_password),
            "secret": resolved.config_password_secret,
            "from_secret": resolved.config_password_from_secret,
        },
        "cache": {
            "password": _mask(resolved.cache_password),
            "from_secret": resolved.cache_password_from_secret,
        },
        "database": {
            **_database(resolved.database),
            "from_secret": resolved.database_from_secret,
            "external": bool(resolved.database_settings and resolved.database_settings.is_external),
            "volume_size": _quantity(resolved.database_volume_size),
        },
        "registry_storage_size": _quantity(resolved.registry_storage_size),
        "tls": {
            "certificate": _mask(resolved.tls_certificate),
            "private_key": _mask(resolved.tls_private_key),
        },
        "registry_backends": [_backend(backend) for backend in resolved.registry_backends],
        "config_files": [_config_file(entry) for entry in resolved.config_files],
        "scanner": {
            "database": {
                **_database(resolved.scanner_database),
                "from_secret": resolved.scanner_database_from_secret,
                "volume_size": _quantity(resolved.scanner_database_volume_size),
            },
            "update_interval_seconds": None if interval is None else interval.total_seconds(),
            "config_files": [_config_file(entry) for entry in resolved.scanner_config_files],
        },
    }
