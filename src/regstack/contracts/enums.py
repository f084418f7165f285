"""Kinds and modes shared across the request, validation and output layers.

All values are the literal strings accepted in request YAML.
"""

from enum import StrEnum


class ExternalAccessType(StrEnum):
    """How the registry is exposed outside the cluster."""

    ROUTE = "Route"
    LOAD_BALANCER = "LoadBalancer"
    NODE_PORT = "NodePort"
    INGRESS = "Ingress"

    @property
    def requires_hostname(self) -> bool:
        """NodePort and Ingress cannot derive a hostname on their own."""
        return self in (ExternalAccessType.NODE_PORT, ExternalAccessType.INGRESS)


class BackendKind(StrEnum):
    """Storage backend variants a registry backend may declare.

    Values match the field names on RegistryBackendSettings.
    """

    LOCAL = "local"
    S3 = "s3"
    AZURE = "azure"
    GOOGLE_CLOUD = "google_cloud"
    RHOCS = "rhocs"
    RADOS = "rados"
    SWIFT = "swift"
    CLOUDFRONT_S3 = "cloudfront_s3"


class ConfigFileType(StrEnum):
    """How a materialized config file is consumed by the service."""

    CONFIG = "config"
    EXTRA_CA_CERT = "extraCaCert"


class RequiredKeysShape(StrEnum):
    """Tag for RequiredKeys.

    NAMED: key -> label mapping, only the keys are required.
    ORDERED: plain ordered list of key names.
    """

    NAMED = "named"
    ORDERED = "ordered"


class CredentialSource(StrEnum):
    """Where a backend's materialized credentials came from."""

    SECRET = "secret"
    INLINE = "inline"
