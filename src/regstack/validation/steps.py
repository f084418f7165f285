# src/regstack/validation/steps.py
"""The validation checklist, one function per step.

Every step has the same shape:

    step(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration

It reads the request from ``ctx``, either raises or returns an updated copy
of ``resolved``, and never mutates its inputs. The orchestrator threads the
value through CHECKLIST in order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

import structlog

from regstack.contracts.enums import ExternalAccessType
from regstack.contracts.errors import ConfigValidationError
from regstack.contracts.request import ConfigurationRequest, DatabaseSettings
from regstack.contracts.resolved import DatabaseCredentials, ResolvedConfiguration, SuperuserCredentials
from regstack.core.duration import parse_duration
from regstack.core.quantity import parse_quantity
from regstack.core.security.secret_store import SecretStore
from regstack.core.security.secret_validator import RequiredKeys, decode, resolve_secret
from regstack.validation.backends import resolve_backends
from regstack.validation.config_files import resolve_config_files
from regstack.validation.keys import (
    CACHE_CREDENTIAL_KEYS,
    CACHE_PASSWORD_KEY,
    CONFIG_CREDENTIAL_KEYS,
    CONFIG_PASSWORD_KEY,
    DATABASE_CREDENTIAL_KEYS,
    DATABASE_NAME_KEY,
    DATABASE_PASSWORD_KEY,
    DATABASE_ROOT_PASSWORD_KEY,
    DATABASE_SERVER_KEY,
    DATABASE_USERNAME_KEY,
    MIN_SUPERUSER_PASSWORD_LENGTH,
    SUPERUSER_CREDENTIAL_KEYS,
    SUPERUSER_EMAIL_KEY,
    SUPERUSER_PASSWORD_KEY,
    SUPERUSER_USERNAME_KEY,
    TLS_CERT_KEY,
    TLS_CERTIFICATE_KEYS,
    TLS_PRIVATE_KEY_KEY,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PassContext:
    """Read-only inputs shared by every step of one pass."""

    request: ConfigurationRequest
    store: SecretStore

    @property
    def namespace(self) -> str:
        return self.request.namespace

    def resolve(self, name: str, required: RequiredKeys | None = None) -> dict[str, bytes]:
        return dict(resolve_secret(self.store, self.namespace, name, required))


type Step = Callable[[PassContext, ResolvedConfiguration], ResolvedConfiguration]


# =============================================================================
# Registry
# =============================================================================


def resolve_superuser(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    """Take superuser credentials from their secret, or from the literal request fields.

    The secret is only consulted while setup is still pending.
    """
    registry = ctx.request.registry
    if registry.superuser_credentials_secret_name and not registry.skip_setup and not ctx.request.status.setup_complete:
        payload = ctx.resolve(registry.superuser_credentials_secret_name, SUPERUSER_CREDENTIAL_KEYS)
        superuser = SuperuserCredentials(
            username=decode(payload, SUPERUSER_USERNAME_KEY),
            email=decode(payload, SUPERUSER_EMAIL_KEY),
            password=decode(payload, SUPERUSER_PASSWORD_KEY),
        )
        return replace(resolved, superuser=superuser, superuser_from_secret=True)

    literal = registry.superuser
    return replace(
        resolved,
        superuser=SuperuserCredentials(username=literal.username, email=literal.email, password=literal.password),
    )


def check_superuser_password(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    """The superuser password must be long enough, wherever it came from."""
    if len(resolved.superuser.password or "") < MIN_SUPERUSER_PASSWORD_LENGTH:
        raise ConfigValidationError(
            f"Superuser password must be at least {MIN_SUPERUSER_PASSWORD_LENGTH} characters in length",
            entity="superuser",
        )
    return resolved


def resolve_config_secret(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    name = ctx.request.registry.config_secret_name
    if not name:
        return resolved
    payload = ctx.resolve(name, CONFIG_CREDENTIAL_KEYS)
    return replace(
        resolved,
        config_password=decode(payload, CONFIG_PASSWORD_KEY),
        config_password_secret=name,
        config_password_from_secret=True,
    )


def check_image_pull_secrets(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    """Pull secrets for the registry, cache and registry database only need to exist."""
    request = ctx.request
    database = request.registry.database
    for name in (
        request.registry.image_pull_secret_name,
        request.cache.image_pull_secret_name,
        database.image_pull_secret_name if database else None,
    ):
        if name:
            ctx.resolve(name)
    return resolved


def resolve_cache_credentials(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    name = ctx.request.cache.credentials_secret_name
    if not name:
        return resolved
    payload = ctx.resolve(name, CACHE_CREDENTIAL_KEYS)
    return replace(resolved, cache_password=decode(payload, CACHE_PASSWORD_KEY), cache_password_from_secret=True)


def _resolve_database(
    ctx: PassContext,
    settings: DatabaseSettings | None,
    component: str,
) -> tuple[DatabaseCredentials, DatabaseSettings | None, bool]:
    """Resolve a database descriptor's credentials.

    A ``database-server`` key in the secret turns the database into an
    external one: the server is overridden and the self-managed fields
    (image, strategy, probes) are cleared on the returned settings copy.

    Returns:
        (credentials, effective settings, whether a secret was used)
    """
    if settings is None:
        return DatabaseCredentials(), None, False

    if settings.server and not settings.credentials_secret_name:
        raise ConfigValidationError(
            f"Failed to locate a {component} database credential for an externally provisioned instance",
            entity=f"{component}.database",
        )

    if not settings.credentials_secret_name:
        return DatabaseCredentials(server=settings.server), settings, False

    payload = ctx.resolve(settings.credentials_secret_name, DATABASE_CREDENTIAL_KEYS)
    credentials = DatabaseCredentials(
        username=decode(payload, DATABASE_USERNAME_KEY),
        password=decode(payload, DATABASE_PASSWORD_KEY),
        database=decode(payload, DATABASE_NAME_KEY),
        server=settings.server,
    )

    if DATABASE_SERVER_KEY in payload:
        server = decode(payload, DATABASE_SERVER_KEY)
        credentials = replace(credentials, server=server)
        logger.info("Database server taken from credentials secret", component=component, server=server)
        settings = settings.model_copy(
            update={
                "server": server,
                "image": None,
                "deployment_strategy": None,
                "readiness_probe": None,
                "liveness_probe": None,
            }
        )

    if DATABASE_ROOT_PASSWORD_KEY in payload:
        credentials = replace(credentials, root_password=decode(payload, DATABASE_ROOT_PASSWORD_KEY))

    return credentials, settings, True


def resolve_database_credentials(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    """Registry database credentials. Skipped entirely when setup is skipped."""
    settings = ctx.request.registry.database
    if ctx.request.registry.skip_setup:
        return replace(resolved, database_settings=settings)

    credentials, settings, from_secret = _resolve_database(ctx, settings, "registry")
    return replace(resolved, database=credentials, database_settings=settings, database_from_secret=from_secret)


def parse_volume_sizes(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    registry = ctx.request.registry
    database_volume = registry.database.volume_size if registry.database else None
    storage = registry.registry_storage
    return replace(
        resolved,
        database_volume_size=parse_quantity(database_volume) if database_volume else None,
        registry_storage_size=parse_quantity(storage.persistent_volume_size) if storage else None,
    )


def resolve_registry_config_files(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    files = resolve_config_files(ctx.store, ctx.namespace, ctx.request.registry.config_files)
    return replace(resolved, config_files=resolved.config_files + files)


def check_external_access(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    access = ctx.request.registry.external_access
    if access.type is None:
        return resolved

    if access.type.requires_hostname and not access.hostname:
        raise ConfigValidationError(
            f"Cannot use {access.type.value} external access type without a hostname defined",
            entity="external_access",
        )

    if access.type is ExternalAccessType.ROUTE and not ctx.request.supports_routes:
        raise ConfigValidationError(
            "Cannot use Route as external access type when the platform does not support routes",
            entity="external_access",
        )
    return resolved


def resolve_registry_backends(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    registry = ctx.request.registry
    backends = resolve_backends(
        ctx.store,
        ctx.namespace,
        registry.registry_backends,
        replication_enabled=registry.enable_storage_replication,
    )
    return replace(resolved, registry_backends=resolved.registry_backends + backends)


def resolve_tls(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    name = ctx.request.registry.external_access.tls.secret_name
    if not name:
        return resolved
    payload = ctx.resolve(name, TLS_CERTIFICATE_KEYS)
    return replace(
        resolved,
        tls_certificate=bytes(payload[TLS_CERT_KEY]),
        tls_private_key=bytes(payload[TLS_PRIVATE_KEY_KEY]),
    )


# =============================================================================
# Scanner
# =============================================================================


def resolve_scanner(ctx: PassContext, resolved: ResolvedConfiguration) -> ResolvedConfiguration:
    """Pull secret, update interval, database and config files of an enabled scanner."""
    scanner = ctx.request.scanner
    if scanner is None or not scanner.enabled:
        return resolved

    if scanner.image_pull_secret_name:
        ctx.resolve(scanner.image_pull_secret_name)

    if scanner.update_interval:
        resolved = replace(resolved, scanner_update_interval=parse_duration(scanner.update_interval))

    credentials, settings, from_secret = _resolve_database(ctx, scanner.database, "scanner")
    volume_size = settings.volume_size if settings else None
    resolved = replace(
        resolved,
        scanner_database=credentials,
        scanner_database_settings=settings,
        scanner_database_from_secret=from_secret,
        scanner_database_volume_size=parse_quantity(volume_size) if volume_size else None,
    )

    files = resolve_config_files(ctx.store, ctx.namespace, scanner.config_files)
    return replace(resolved, scanner_config_files=resolved.scanner_config_files + files)


CHECKLIST: tuple[tuple[str, Step], ...] = (
    ("superuser", resolve_superuser),
    ("superuser_password", check_superuser_password),
    ("config_secret", resolve_config_secret),
    ("image_pull_secrets", check_image_pull_secrets),
    ("cache_credentials", resolve_cache_credentials),
    ("database_credentials", resolve_database_credentials),
    ("volume_sizes", parse_volume_sizes),
    ("config_files", resolve_registry_config_files),
    ("external_access", check_external_access),
    ("registry_backends", resolve_registry_backends),
    ("tls", resolve_tls),
    ("scanner", resolve_scanner),
)
