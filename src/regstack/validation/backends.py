# src/regstack/validation/backends.py
"""Registry backend validation.

Each storage variant is described by one BackendVariantSpec row:

- location_field: the variant's bucket/container field, required together
  with storage_path
- credential_keys: keys a credentials secret must contain
- projection: secret key -> storage field, for required keys
- optional_projection: secret key -> storage field, copied only if present

resolve_backend() applies the same algorithm to every row, so adding a
variant means adding a row, not a code path.

Inline fields are checked after credential resolution for every variant.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from regstack.contracts.enums import BackendKind, CredentialSource
from regstack.contracts.errors import ConfigValidationError, InvalidCombinationError
from regstack.contracts.request import RegistryBackendSettings
from regstack.contracts.resolved import (
    BackendCredentials,
    MaterializedCredentials,
    ResolvedRegistryBackend,
    UnresolvedCredentials,
)
from regstack.core.security.secret_store import SecretStore
from regstack.core.security.secret_validator import RequiredKeys, decode, resolve_secret
from regstack.validation.keys import (
    ACCESS_KEY_KEY,
    AZURE_ACCOUNT_KEY_KEY,
    AZURE_ACCOUNT_NAME_KEY,
    AZURE_SAS_TOKEN_KEY,
    SECRET_KEY_KEY,
    SWIFT_PASSWORD_KEY,
    SWIFT_USER_KEY,
)

logger = structlog.get_logger(__name__)

STORAGE_PATH_FIELD = "storage_path"


@dataclass(frozen=True, slots=True)
class BackendVariantSpec:
    """Structural and credential rules for one storage variant."""

    kind: BackendKind
    location_field: str | None
    credential_keys: RequiredKeys
    projection: Mapping[str, str] = field(default_factory=dict)
    optional_projection: Mapping[str, str] = field(default_factory=dict)

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Inline fields that must be non-empty once credentials are resolved."""
        if self.location_field is None:
            return ()
        return (STORAGE_PATH_FIELD, self.location_field)

    @property
    def has_credentials(self) -> bool:
        return bool(self.credential_keys)


def _access_key_variant(kind: BackendKind) -> BackendVariantSpec:
    return BackendVariantSpec(
        kind=kind,
        location_field="bucket_name",
        credential_keys=RequiredKeys.ordered([ACCESS_KEY_KEY, SECRET_KEY_KEY]),
        projection={ACCESS_KEY_KEY: "access_key", SECRET_KEY_KEY: "secret_key"},
    )


VARIANTS: Mapping[BackendKind, BackendVariantSpec] = {
    BackendKind.LOCAL: BackendVariantSpec(
        kind=BackendKind.LOCAL,
        location_field=None,
        credential_keys=RequiredKeys.none(),
    ),
    BackendKind.S3: _access_key_variant(BackendKind.S3),
    BackendKind.AZURE: BackendVariantSpec(
        kind=BackendKind.AZURE,
        location_field="container_name",
        credential_keys=RequiredKeys.ordered([AZURE_ACCOUNT_NAME_KEY, AZURE_ACCOUNT_KEY_KEY]),
        projection={AZURE_ACCOUNT_NAME_KEY: "account_name", AZURE_ACCOUNT_KEY_KEY: "account_key"},
        optional_projection={AZURE_SAS_TOKEN_KEY: "sas_token"},
    ),
    BackendKind.GOOGLE_CLOUD: _access_key_variant(BackendKind.GOOGLE_CLOUD),
    BackendKind.RHOCS: _access_key_variant(BackendKind.RHOCS),
    BackendKind.RADOS: _access_key_variant(BackendKind.RADOS),
    BackendKind.SWIFT: BackendVariantSpec(
        kind=BackendKind.SWIFT,
        location_field="container",
        credential_keys=RequiredKeys.ordered([SWIFT_USER_KEY, SWIFT_PASSWORD_KEY]),
        projection={SWIFT_USER_KEY: "user", SWIFT_PASSWORD_KEY: "password"},
    ),
    BackendKind.CLOUDFRONT_S3: _access_key_variant(BackendKind.CLOUDFRONT_S3),
}


def credential_state(backend: RegistryBackendSettings) -> BackendCredentials | None:
    """Credential state of a backend as declared, before resolution.

    Returns:
        None for variants without credentials, UnresolvedCredentials when a
        secret is named, otherwise inline MaterializedCredentials
    """
    if not VARIANTS[backend.kind].has_credentials:
        return None
    if backend.credentials_secret_name:
        return UnresolvedCredentials(secret_name=backend.credentials_secret_name)
    return MaterializedCredentials(source=CredentialSource.INLINE)


def resolve_backend(
    store: SecretStore,
    namespace: str,
    backend: RegistryBackendSettings,
    *,
    replication_enabled: bool,
) -> ResolvedRegistryBackend:
    """Validate one registry backend and materialize its credentials.

    The caller's declaration is never modified; the returned backend holds
    an updated copy of the storage settings.

    Args:
        store: Secret store for credential secrets
        namespace: Namespace to read secrets from
        backend: The declared backend
        replication_enabled: Whether storage replication is enabled globally

    Returns:
        The resolved backend

    Raises:
        InvalidCombinationError: If the backend is local and replication is enabled
        SecretNotFoundError: If the credentials secret does not exist
        MissingSecretKeyError: If the credentials secret lacks a required key
        ConfigValidationError: If storage path or bucket/container is empty
    """
    variant = VARIANTS[backend.kind]

    if replication_enabled and backend.kind is BackendKind.LOCAL:
        raise InvalidCombinationError(
            f"Cannot make use of local storage when replication is enabled. Local storage: {backend.name}",
            entity=backend.name,
        )

    storage = backend.storage.model_copy(deep=True)
    credentials = credential_state(backend)

    if isinstance(credentials, UnresolvedCredentials):
        payload = resolve_secret(store, namespace, credentials.secret_name, variant.credential_keys)

        updates = {storage_field: decode(payload, key) for key, storage_field in variant.projection.items()}
        projected = list(variant.projection)
        for key, storage_field in variant.optional_projection.items():
            if key in payload:
                updates[storage_field] = decode(payload, key)
                projected.append(key)

        storage = storage.model_copy(update=updates)
        credentials = MaterializedCredentials(
            source=CredentialSource.SECRET,
            secret_name=credentials.secret_name,
            keys=tuple(projected),
        )
        logger.debug(
            "Materialized backend credentials",
            backend=backend.name,
            kind=backend.kind.value,
            secret=credentials.secret_name,
            keys=list(credentials.keys),
        )

    empty = [name for name in variant.required_fields if not getattr(storage, name)]
    if empty:
        raise ConfigValidationError(
            f"Failed to validate required properties for registry backend. Name: {backend.name}, empty fields: {empty}",
            entity=backend.name,
        )

    return ResolvedRegistryBackend(
        name=backend.name,
        kind=backend.kind,
        storage=storage,
        credentials=credentials,
    )


def resolve_backends(
    store: SecretStore,
    namespace: str,
    backends: list[RegistryBackendSettings],
    *,
    replication_enabled: bool,
) -> tuple[ResolvedRegistryBackend, ...]:
    """Resolve backends in declaration order, stopping at the first failure."""
    return tuple(
        resolve_backend(store, namespace, backend, replication_enabled=replication_enabled) for backend in backends
    )
