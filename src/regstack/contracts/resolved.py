# src/regstack/contracts/resolved.py
"""Output of a validation pass.

A ResolvedConfiguration exists only within one pass: it is created empty,
threaded by value through the orchestrator's steps (each step returns an
updated copy via dataclasses.replace), and handed to the caller on
success. Persistence is the caller's concern.

Secret-derived fields are excluded from repr so a stray log line or
traceback cannot leak them. Use regstack.validation.summary for a
printable view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from regstack.contracts.enums import BackendKind, ConfigFileType, CredentialSource
from regstack.contracts.request import DatabaseSettings, StorageVariant
from regstack.core.quantity import Quantity


@dataclass(frozen=True, slots=True)
class SuperuserCredentials:
    """Initial registry superuser identity."""

    username: str | None = None
    email: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class DatabaseCredentials:
    """Credentials for the registry or scanner database. Every field is optional."""

    username: str | None = None
    password: str | None = field(default=None, repr=False)
    database: str | None = None
    server: str | None = None
    root_password: str | None = field(default=None, repr=False)


# =============================================================================
# Backend credential state
# =============================================================================


@dataclass(frozen=True, slots=True)
class UnresolvedCredentials:
    """A backend whose credentials still live behind a secret reference."""

    secret_name: str


@dataclass(frozen=True, slots=True)
class MaterializedCredentials:
    """A backend whose credential fields are populated on its storage settings.

    Attributes:
        source: SECRET if projected from a secret, INLINE if declared directly
        secret_name: The secret they came from (SECRET only)
        keys: Secret keys that were projected, in projection order
    """

    source: CredentialSource
    secret_name: str | None = None
    keys: tuple[str, ...] = ()


type BackendCredentials = UnresolvedCredentials | MaterializedCredentials


@dataclass(frozen=True, slots=True)
class ResolvedRegistryBackend:
    """A validated registry backend with credentials materialized.

    ``credentials`` is None for local backends, which have none.
    """

    name: str
    kind: BackendKind
    storage: StorageVariant = field(repr=False)
    credentials: MaterializedCredentials | None = None


@dataclass(frozen=True, slots=True)
class ConfigFileEntry:
    """One materialized configuration file. Only the resolver creates these."""

    type: ConfigFileType
    key: str
    filename: str
    content: bytes = field(repr=False)


# =============================================================================
# Aggregate
# =============================================================================


@dataclass(frozen=True, slots=True)
class ResolvedConfiguration:
    """Everything a validation pass resolved."""

    namespace: str

    superuser: SuperuserCredentials = field(default_factory=SuperuserCredentials)
    superuser_from_secret: bool = False

    config_password: str | None = field(default=None, repr=False)
    config_password_secret: str | None = None
    config_password_from_secret: bool = False

    cache_password: str | None = field(default=None, repr=False)
    cache_password_from_secret: bool = False

    database: DatabaseCredentials = field(default_factory=DatabaseCredentials)
    database_settings: DatabaseSettings | None = None
    database_from_secret: bool = False
    database_volume_size: Quantity | None = None
    registry_storage_size: Quantity | None = None

    tls_certificate: bytes | None = field(default=None, repr=False)
    tls_private_key: bytes | None = field(default=None, repr=False)

    registry_backends: tuple[ResolvedRegistryBackend, ...] = ()
    config_files: tuple[ConfigFileEntry, ...] = ()

    scanner_database: DatabaseCredentials = field(default_factory=DatabaseCredentials)
    scanner_database_settings: DatabaseSettings | None = None
    scanner_database_from_secret: bool = False
    scanner_database_volume_size: Quantity | None = None
    scanner_update_interval: timedelta | None = None
    scanner_config_files: tuple[ConfigFileEntry, ...] = ()
