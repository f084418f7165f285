# src/regstack/contracts/request.py
"""Declarative configuration request schema.

The request is read-only input to a validation pass. All models are frozen.
Nested models reject unknown fields, so a typo such as ``secretname`` fails
at load time instead of silently disabling a check.

Example YAML:
    namespace: registry
    supports_routes: true
    registry:
      superuser_credentials_secret_name: registry-superuser
      database:
        credentials_secret_name: registry-db
      registry_backends:
        - name: default
          credentials_secret_name: s3-creds
          s3:
            storage_path: /registry
            bucket_name: images
      external_access:
        type: Route
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from regstack.contracts.enums import BackendKind, ConfigFileType, ExternalAccessType


class SuperuserSettings(BaseModel):
    """Literal superuser credentials, used when no credentials secret is named."""

    model_config = {"frozen": True, "extra": "forbid"}

    username: str | None = None
    email: str | None = None
    password: str | None = None


class DatabaseSettings(BaseModel):
    """Database descriptor for the registry or the scanner.

    Either a self-managed database (image, probes, volume) or an external
    server reached with credentials from a secret.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    server: str | None = Field(default=None, description="External database host")
    credentials_secret_name: str | None = Field(default=None, description="Secret holding database credentials")
    image: str | None = Field(default=None, description="Image for a self-managed database")
    image_pull_secret_name: str | None = None
    volume_size: str | None = Field(default=None, description="Resource quantity, e.g. 10Gi")
    deployment_strategy: str | None = None
    readiness_probe: dict[str, Any] | None = None
    liveness_probe: dict[str, Any] | None = None

    @property
    def is_external(self) -> bool:
        """Whether the descriptor points at an externally provisioned server."""
        return bool(self.server)


class RegistryStorageSettings(BaseModel):
    """Persistent volume backing local registry storage."""

    model_config = {"frozen": True, "extra": "forbid"}

    persistent_volume_size: str = Field(description="Resource quantity, e.g. 50Gi")
    persistent_volume_access_modes: list[str] = Field(default_factory=list)
    persistent_volume_storage_class_name: str | None = None


class TLSSettings(BaseModel):
    """TLS material for external access."""

    model_config = {"frozen": True, "extra": "forbid"}

    secret_name: str | None = None


class ExternalAccessSettings(BaseModel):
    """How the registry is reachable from outside the cluster."""

    model_config = {"frozen": True, "extra": "forbid"}

    type: ExternalAccessType | None = None
    hostname: str | None = None
    tls: TLSSettings = Field(default_factory=TLSSettings)


# =============================================================================
# Registry backend variants
# =============================================================================


class LocalStorage(BaseModel):
    """Filesystem storage on the registry's own volume."""

    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""


class S3Storage(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    bucket_name: str = ""
    access_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    port: int | None = None


class AzureStorage(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    container_name: str = ""
    account_name: str | None = None
    account_key: str | None = None
    sas_token: str | None = None


class GoogleCloudStorage(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    bucket_name: str = ""
    access_key: str | None = None
    secret_key: str | None = None


class RHOCSStorage(BaseModel):
    """Red Hat OpenShift Container Storage (NooBaa) object storage."""

    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    bucket_name: str = ""
    access_key: str | None = None
    secret_key: str | None = None
    hostname: str | None = None
    secure: bool | None = None
    port: int | None = None


class RADOSStorage(BaseModel):
    """Ceph RADOS gateway object storage."""

    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    bucket_name: str = ""
    access_key: str | None = None
    secret_key: str | None = None
    hostname: str | None = None
    secure: bool | None = None
    port: int | None = None


class SwiftStorage(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    container: str = ""
    auth_url: str | None = None
    auth_version: str | None = None
    user: str | None = None
    password: str | None = None
    os_options: dict[str, str] = Field(default_factory=dict)
    ca_cert_path: str | None = None
    temp_url_key: str | None = None


class CloudfrontS3Storage(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage_path: str = ""
    bucket_name: str = ""
    access_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    port: int | None = None
    distribution_domain: str | None = None
    key_id: str | None = None
    private_key_filename: str | None = None


type StorageVariant = (
    LocalStorage
    | S3Storage
    | AzureStorage
    | GoogleCloudStorage
    | RHOCSStorage
    | RADOSStorage
    | SwiftStorage
    | CloudfrontS3Storage
)


class RegistryBackendSettings(BaseModel):
    """One named storage backend for the registry.

    Exactly one variant field must be set. The field name is the backend
    kind (see BackendKind).
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(min_length=1, description="Backend identifier (unique within the request)")
    credentials_secret_name: str | None = Field(
        default=None,
        description="Secret whose keys are projected into the variant's credential fields",
    )

    local: LocalStorage | None = None
    s3: S3Storage | None = None
    azure: AzureStorage | None = None
    google_cloud: GoogleCloudStorage | None = None
    rhocs: RHOCSStorage | None = None
    rados: RADOSStorage | None = None
    swift: SwiftStorage | None = None
    cloudfront_s3: CloudfrontS3Storage | None = None

    @model_validator(mode="after")
    def validate_single_variant(self) -> "RegistryBackendSettings":
        """A backend is exactly one storage kind."""
        declared = [kind.value for kind in BackendKind if getattr(self, kind.value) is not None]
        if len(declared) != 1:
            raise ValueError(
                f"Registry backend '{self.name}' must declare exactly one storage variant, "
                f"found {len(declared)}: {declared}. Valid variants: {[k.value for k in BackendKind]}"
            )
        return self

    @property
    def kind(self) -> BackendKind:
        """The declared storage variant."""
        for kind in BackendKind:
            if getattr(self, kind.value) is not None:
                return kind
        raise AssertionError("unreachable: validate_single_variant guarantees one variant")

    @property
    def storage(self) -> StorageVariant:
        """The declared variant's settings."""
        variant: StorageVariant = getattr(self, self.kind.value)
        return variant


# =============================================================================
# Config files
# =============================================================================


class ConfigFileRequest(BaseModel):
    """Explicit selection of one key from a config-file secret."""

    model_config = {"frozen": True, "extra": "forbid"}

    key: str = Field(min_length=1, description="Key within the secret")
    filename: str | None = Field(default=None, description="Output filename (defaults to key)")
    type: ConfigFileType | None = None

    @property
    def output_filename(self) -> str:
        return self.filename or self.key


class ConfigFileGroup(BaseModel):
    """A set of config files sourced from one secret.

    When ``files`` is empty every key in the secret becomes a file.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    secret_name: str = Field(default="", description="Secret holding the file contents")
    type: ConfigFileType | None = Field(default=None, description="Default type for files in this group")
    files: list[ConfigFileRequest] = Field(default_factory=list)

    def get_keys(self) -> list[str]:
        """Keys explicitly requested, in declaration order."""
        return [f.key for f in self.files]


# =============================================================================
# Components
# =============================================================================


class RegistrySettings(BaseModel):
    """The registry service and everything it owns."""

    model_config = {"frozen": True, "extra": "forbid"}

    superuser: SuperuserSettings = Field(default_factory=SuperuserSettings)
    superuser_credentials_secret_name: str | None = None
    config_secret_name: str | None = None
    image_pull_secret_name: str | None = None
    skip_setup: bool = Field(default=False, description="Skip initial setup (superuser and database bootstrap)")
    database: DatabaseSettings | None = None
    registry_storage: RegistryStorageSettings | None = None
    enable_storage_replication: bool = False
    registry_backends: list[RegistryBackendSettings] = Field(default_factory=list)
    config_files: list[ConfigFileGroup] = Field(default_factory=list)
    external_access: ExternalAccessSettings = Field(default_factory=ExternalAccessSettings)

    @field_validator("registry_backends")
    @classmethod
    def validate_unique_backend_names(cls, v: list[RegistryBackendSettings]) -> list[RegistryBackendSettings]:
        """Backend names identify backends in errors and in the resolved output."""
        names = [backend.name for backend in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate registry backend name(s): {duplicates}")
        return v


class CacheSettings(BaseModel):
    """The cache (redis) service."""

    model_config = {"frozen": True, "extra": "forbid"}

    image_pull_secret_name: str | None = None
    credentials_secret_name: str | None = None


class ScannerSettings(BaseModel):
    """The optional vulnerability scanner."""

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = False
    image_pull_secret_name: str | None = None
    update_interval: str | None = Field(default=None, description="Duration literal, e.g. 500m or 24h")
    database: DatabaseSettings | None = None
    config_files: list[ConfigFileGroup] = Field(default_factory=list)


class StatusSettings(BaseModel):
    """Observed state reported back by the deployment."""

    model_config = {"frozen": True, "extra": "forbid"}

    setup_complete: bool = False


class ConfigurationRequest(BaseModel):
    """Top-level request validated by one pass.

    This is the single input to regstack.validation.validate(). It is never
    mutated; the pass produces a separate ResolvedConfiguration.

    Unknown top-level keys are ignored: REGSTACK_* environment variables that
    are not request fields (e.g. REGSTACK_FINGERPRINT_KEY) land here.
    """

    model_config = {"frozen": True}

    namespace: str = Field(default="default", min_length=1, description="Namespace all secrets are read from")
    supports_routes: bool = Field(
        default=False,
        description="Whether the target platform offers Route-type external access",
    )
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    scanner: ScannerSettings | None = None
    status: StatusSettings = Field(default_factory=StatusSettings)

    @property
    def scanner_enabled(self) -> bool:
        return self.scanner is not None and self.scanner.enabled
