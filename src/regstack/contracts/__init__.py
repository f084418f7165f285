"""Shared contracts for regstack.

The request schema (input), the resolved configuration (output), the
error taxonomy, and the enums both sides use.
"""

from regstack.contracts.enums import (
    BackendKind,
    ConfigFileType,
    CredentialSource,
    ExternalAccessType,
    RequiredKeysShape,
)
from regstack.contracts.errors import (
    ConfigValidationError,
    DurationParseError,
    InvalidCombinationError,
    MissingSecretKeyError,
    ParseError,
    QuantityParseError,
    RegstackError,
    SecretNotFoundError,
    SecretRetrievalError,
)
from regstack.contracts.request import (
    AzureStorage,
    CacheSettings,
    CloudfrontS3Storage,
    ConfigFileGroup,
    ConfigFileRequest,
    ConfigurationRequest,
    DatabaseSettings,
    ExternalAccessSettings,
    GoogleCloudStorage,
    LocalStorage,
    RADOSStorage,
    RegistryBackendSettings,
    RegistrySettings,
    RegistryStorageSettings,
    RHOCSStorage,
    S3Storage,
    ScannerSettings,
    StatusSettings,
    StorageVariant,
    SuperuserSettings,
    SwiftStorage,
    TLSSettings,
)
from regstack.contracts.resolved import (
    BackendCredentials,
    ConfigFileEntry,
    DatabaseCredentials,
    MaterializedCredentials,
    ResolvedConfiguration,
    ResolvedRegistryBackend,
    SuperuserCredentials,
    UnresolvedCredentials,
)

__all__ = [
    # enums
    "BackendKind",
    "ConfigFileType",
    "CredentialSource",
    "ExternalAccessType",
    "RequiredKeysShape",
    # errors
    "ConfigValidationError",
    "DurationParseError",
    "InvalidCombinationError",
    "MissingSecretKeyError",
    "ParseError",
    "QuantityParseError",
    "RegstackError",
    "SecretNotFoundError",
    "SecretRetrievalError",
    # request
    "AzureStorage",
    "CacheSettings",
    "CloudfrontS3Storage",
    "ConfigFileGroup",
    "ConfigFileRequest",
    "ConfigurationRequest",
    "DatabaseSettings",
    "ExternalAccessSettings",
    "GoogleCloudStorage",
    "LocalStorage",
    "RADOSStorage",
    "RegistryBackendSettings",
    "RegistrySettings",
    "RegistryStorageSettings",
    "RHOCSStorage",
    "S3Storage",
    "ScannerSettings",
    "StatusSettings",
    "StorageVariant",
    "SuperuserSettings",
    "SwiftStorage",
    "TLSSettings",
    # resolved
    "BackendCredentials",
    "ConfigFileEntry",
    "DatabaseCredentials",
    "MaterializedCredentials",
    "ResolvedConfiguration",
    "ResolvedRegistryBackend",
    "SuperuserCredentials",
    "UnresolvedCredentials",
]
