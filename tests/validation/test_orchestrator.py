# tests/validation/test_orchestrator.py
"""Tests for the validation pass as a whole."""

from datetime import timedelta

import pytest

from tests.conftest import NAMESPACE, VALID_PASSWORD, RecordingSecretStore, make_request

SUPERUSER_SECRET = {
    "superuser-username": "quayadmin",
    "superuser-password": "from-secret-password",
    "superuser-email": "quayadmin@example.com",
}
DATABASE_SECRET = {
    "database-username": "quay",
    "database-password": "db-password",
    "database-name": "quay",
}
S3_SECRET = {"accessKey": "AKIA", "secretKey": "s3cr3t"}


class TestSuperuser:
    """Steps 1 and 2: superuser credentials and password length."""

    def test_short_literal_password_fails_before_any_fetch(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        request = make_request(
            registry={
                "superuser": {"username": "admin", "email": "a@example.com", "password": "short"},
                "config_secret_name": "config-app",
                "image_pull_secret_name": "pull",
            }
        )

        with pytest.raises(ConfigValidationError, match="at least 8 characters") as exc_info:
            validate(request, store)

        assert exc_info.value.entity == "superuser"
        assert store.lookups == []

    def test_missing_password_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        request = make_request(registry={"superuser": {"username": "admin"}})

        with pytest.raises(ConfigValidationError):
            validate(request, store)

    def test_eight_character_password_passes(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        request = make_request(registry={"superuser": {"password": "12345678"}})

        assert validate(request, store).superuser.password == "12345678"

    def test_credentials_from_secret(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "superuser", SUPERUSER_SECRET)
        request = make_request(registry={"superuser_credentials_secret_name": "superuser"})

        resolved = validate(request, store)

        assert resolved.superuser.username == "quayadmin"
        assert resolved.superuser.password == "from-secret-password"
        assert resolved.superuser.email == "quayadmin@example.com"
        assert resolved.superuser_from_secret is True

    def test_secret_missing_email_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import MissingSecretKeyError
        from regstack.validation import validate

        store.put(NAMESPACE, "superuser", {k: v for k, v in SUPERUSER_SECRET.items() if k != "superuser-email"})
        request = make_request(registry={"superuser_credentials_secret_name": "superuser"})

        with pytest.raises(MissingSecretKeyError) as exc_info:
            validate(request, store)

        assert exc_info.value.missing_keys == ("superuser-email",)

    def test_short_password_from_secret_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        store.put(NAMESPACE, "superuser", {**SUPERUSER_SECRET, "superuser-password": "short"})
        request = make_request(registry={"superuser_credentials_secret_name": "superuser"})

        with pytest.raises(ConfigValidationError):
            validate(request, store)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"registry": {"superuser_credentials_secret_name": "superuser", "skip_setup": True}},
            {"registry": {"superuser_credentials_secret_name": "superuser"}, "status": {"setup_complete": True}},
        ],
        ids=["skip_setup", "setup_complete"],
    )
    def test_secret_not_consulted_once_setup_is_not_pending(
        self, store: RecordingSecretStore, overrides: dict
    ) -> None:
        from regstack.validation import validate

        resolved = validate(make_request(**overrides), store)

        assert "superuser" not in store.names
        assert resolved.superuser_from_secret is False
        assert resolved.superuser.password == VALID_PASSWORD


class TestRegistrySecrets:
    """Steps 3 to 5: config app, pull secrets and cache."""

    def test_config_app_password(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "config-app", {"config-app-password": "config-pw"})

        resolved = validate(make_request(registry={"config_secret_name": "config-app"}), store)

        assert resolved.config_password == "config-pw"
        assert resolved.config_password_secret == "config-app"
        assert resolved.config_password_from_secret is True

    def test_config_app_secret_missing_key(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import MissingSecretKeyError
        from regstack.validation import validate

        store.put(NAMESPACE, "config-app", {"password": "wrong-key"})

        with pytest.raises(MissingSecretKeyError):
            validate(make_request(registry={"config_secret_name": "config-app"}), store)

    def test_pull_secrets_only_need_to_exist(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "registry-pull", {})
        store.put(NAMESPACE, "cache-pull", {})
        store.put(NAMESPACE, "db-pull", {})
        request = make_request(
            registry={"image_pull_secret_name": "registry-pull", "database": {"image_pull_secret_name": "db-pull"}},
            cache={"image_pull_secret_name": "cache-pull"},
        )

        validate(request, store)

        assert store.names == ["registry-pull", "cache-pull", "db-pull"]

    def test_missing_pull_secret_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import SecretNotFoundError
        from regstack.validation import validate

        with pytest.raises(SecretNotFoundError) as exc_info:
            validate(make_request(cache={"image_pull_secret_name": "cache-pull"}), store)

        assert exc_info.value.name == "cache-pull"
        assert exc_info.value.namespace == NAMESPACE

    def test_cache_password(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "redis", {"password": "redis-pw"})

        resolved = validate(make_request(cache={"credentials_secret_name": "redis"}), store)

        assert resolved.cache_password == "redis-pw"
        assert resolved.cache_password_from_secret is True


class TestDatabase:
    """Step 6: registry database credentials."""

    def test_credentials_from_secret(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "db", DATABASE_SECRET)
        request = make_request(registry={"database": {"credentials_secret_name": "db", "image": "postgres:13"}})

        resolved = validate(request, store)

        assert resolved.database.username == "quay"
        assert resolved.database.password == "db-password"
        assert resolved.database.database == "quay"
        assert resolved.database.root_password is None
        assert resolved.database_from_secret is True
        assert resolved.database_settings.image == "postgres:13"

    def test_server_in_secret_makes_database_external(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(
            NAMESPACE,
            "db",
            {**DATABASE_SECRET, "database-server": "db.example.com", "database-root-password": "root-pw"},
        )
        request = make_request(
            registry={
                "database": {
                    "credentials_secret_name": "db",
                    "image": "postgres:13",
                    "deployment_strategy": "Recreate",
                    "readiness_probe": {"initialDelaySeconds": 5},
                    "liveness_probe": {"initialDelaySeconds": 15},
                }
            }
        )

        resolved = validate(request, store)

        settings = resolved.database_settings
        assert resolved.database.server == "db.example.com"
        assert resolved.database.root_password == "root-pw"
        assert settings.server == "db.example.com"
        assert settings.is_external
        assert settings.image is None
        assert settings.deployment_strategy is None
        assert settings.readiness_probe is None
        assert settings.liveness_probe is None
        # Request is untouched
        assert request.registry.database.image == "postgres:13"
        assert request.registry.database.server is None

    def test_external_server_without_secret_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        request = make_request(registry={"database": {"server": "db.example.com"}})

        with pytest.raises(ConfigValidationError) as exc_info:
            validate(request, store)

        assert exc_info.value.entity == "registry.database"

    def test_secret_missing_keys_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import MissingSecretKeyError
        from regstack.validation import validate

        store.put(NAMESPACE, "db", {"database-username": "quay"})

        with pytest.raises(MissingSecretKeyError) as exc_info:
            validate(make_request(registry={"database": {"credentials_secret_name": "db"}}), store)

        assert exc_info.value.missing_keys == ("database-password", "database-name")

    def test_skipped_when_setup_is_skipped(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        request = make_request(registry={"skip_setup": True, "database": {"credentials_secret_name": "absent-db"}})

        resolved = validate(request, store)

        assert "absent-db" not in store.names
        assert resolved.database_from_secret is False
        assert resolved.database_settings == request.registry.database


class TestVolumeSizes:
    """Step 7: quantity literals."""

    def test_sizes_are_parsed(self, store: RecordingSecretStore) -> None:
        from regstack.core.quantity import parse_quantity
        from regstack.validation import validate

        request = make_request(
            registry={"database": {"volume_size": "10Gi"}, "registry_storage": {"persistent_volume_size": "50Gi"}}
        )

        resolved = validate(request, store)

        assert resolved.database_volume_size == parse_quantity("10Gi")
        assert resolved.registry_storage_size == parse_quantity("50Gi")

    def test_absent_sizes_stay_none(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        resolved = validate(make_request(), store)

        assert resolved.database_volume_size is None
        assert resolved.registry_storage_size is None

    def test_malformed_size_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import QuantityParseError
        from regstack.validation import validate

        request = make_request(registry={"registry_storage": {"persistent_volume_size": "10Gx"}})

        with pytest.raises(QuantityParseError) as exc_info:
            validate(request, store)

        assert exc_info.value.literal == "10Gx"


class TestExternalAccess:
    """Step 9: external access rules."""

    @pytest.mark.parametrize("access_type", ["NodePort", "Ingress"])
    def test_hostname_required(self, store: RecordingSecretStore, access_type: str) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        request = make_request(registry={"external_access": {"type": access_type}})

        with pytest.raises(ConfigValidationError, match=f"Cannot use {access_type}"):
            validate(request, store)

    @pytest.mark.parametrize("access_type", ["NodePort", "Ingress"])
    def test_hostname_given(self, store: RecordingSecretStore, access_type: str) -> None:
        from regstack.validation import validate

        request = make_request(registry={"external_access": {"type": access_type, "hostname": "registry.example.com"}})

        validate(request, store)

    def test_load_balancer_needs_no_hostname(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        validate(make_request(registry={"external_access": {"type": "LoadBalancer"}}), store)

    def test_route_requires_platform_support(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        request = make_request(registry={"external_access": {"type": "Route"}})

        with pytest.raises(ConfigValidationError, match="does not support routes"):
            validate(request, store)

    def test_route_allowed_when_supported(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        request = make_request(supports_routes=True, registry={"external_access": {"type": "Route"}})

        validate(request, store)


class TestBackendsAndTLS:
    """Steps 10 and 11."""

    def test_s3_with_empty_bucket_fails_naming_backend(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        store.put(NAMESPACE, "s3-creds", S3_SECRET)
        request = make_request(
            registry={
                "registry_backends": [
                    {"name": "primary-s3", "credentials_secret_name": "s3-creds", "s3": {"storage_path": "/registry"}},
                ]
            }
        )

        with pytest.raises(ConfigValidationError, match="primary-s3"):
            validate(request, store)

    def test_local_backend_with_replication_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import InvalidCombinationError
        from regstack.validation import validate

        request = make_request(
            registry={
                "enable_storage_replication": True,
                "registry_backends": [{"name": "disk", "local": {"storage_path": "/datastorage"}}],
            }
        )

        with pytest.raises(InvalidCombinationError):
            validate(request, store)

    def test_backends_resolved_in_order(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "s3-creds", S3_SECRET)
        request = make_request(
            registry={
                "registry_backends": [
                    {"name": "disk", "local": {"storage_path": "/datastorage"}},
                    {
                        "name": "cloud",
                        "credentials_secret_name": "s3-creds",
                        "s3": {"storage_path": "/r", "bucket_name": "images"},
                    },
                ]
            }
        )

        resolved = validate(request, store)

        assert [b.name for b in resolved.registry_backends] == ["disk", "cloud"]
        assert resolved.registry_backends[1].storage.access_key == "AKIA"
        assert request.registry.registry_backends[1].s3.access_key is None

    def test_tls_material(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        store.put(NAMESPACE, "tls", {"tls.crt": b"CERT", "tls.key": b"KEY"})
        request = make_request(registry={"external_access": {"type": "LoadBalancer", "tls": {"secret_name": "tls"}}})

        resolved = validate(request, store)

        assert resolved.tls_certificate == b"CERT"
        assert resolved.tls_private_key == b"KEY"

    def test_tls_secret_missing_key(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import MissingSecretKeyError
        from regstack.validation import validate

        store.put(NAMESPACE, "tls", {"tls.crt": b"CERT"})
        request = make_request(registry={"external_access": {"tls": {"secret_name": "tls"}}})

        with pytest.raises(MissingSecretKeyError) as exc_info:
            validate(request, store)

        assert exc_info.value.missing_keys == ("tls.key",)


class TestScanner:
    """Step 12: scanner components."""

    def test_disabled_scanner_is_not_validated(self, store: RecordingSecretStore) -> None:
        from regstack.validation import validate

        request = make_request(
            scanner={"enabled": False, "image_pull_secret_name": "absent", "update_interval": "bogus"}
        )

        resolved = validate(request, store)

        assert store.lookups == []
        assert resolved.scanner_update_interval is None

    def test_enabled_scanner(self, store: RecordingSecretStore) -> None:
        from regstack.core.quantity import parse_quantity
        from regstack.validation import validate

        store.put(NAMESPACE, "scanner-pull", {})
        store.put(NAMESPACE, "scanner-db", {**DATABASE_SECRET, "database-name": "clair"})
        store.put(NAMESPACE, "scanner-config", {"config.yaml": "updater: {}"})
        request = make_request(
            scanner={
                "enabled": True,
                "image_pull_secret_name": "scanner-pull",
                "update_interval": "500m",
                "database": {"credentials_secret_name": "scanner-db", "volume_size": "5Gi"},
                "config_files": [{"secret_name": "scanner-config"}],
            }
        )

        resolved = validate(request, store)

        assert resolved.scanner_update_interval == timedelta(minutes=500)
        assert resolved.scanner_database.database == "clair"
        assert resolved.scanner_database_from_secret is True
        assert resolved.scanner_database_volume_size == parse_quantity("5Gi")
        assert [e.filename for e in resolved.scanner_config_files] == ["config.yaml"]
        assert resolved.config_files == ()

    def test_scanner_database_validated_even_when_setup_skipped(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import SecretNotFoundError
        from regstack.validation import validate

        request = make_request(
            registry={"skip_setup": True},
            scanner={"enabled": True, "database": {"credentials_secret_name": "absent-scanner-db"}},
        )

        with pytest.raises(SecretNotFoundError):
            validate(request, store)

    def test_malformed_update_interval_fails(self, store: RecordingSecretStore) -> None:
        from regstack.contracts.errors import DurationParseError
        from regstack.validation import validate

        request = make_request(scanner={"enabled": True, "update_interval": "24hours"})

        with pytest.raises(DurationParseError, match="unknown unit"):
            validate(request, store)

    def test_update_interval_checked_before_scanner_database(self, store: RecordingSecretStore) -> None:
        """A bad interval is reported before the scanner database secret is fetched."""
        from regstack.contracts.errors import DurationParseError
        from regstack.validation import validate

        request = make_request(
            scanner={
                "enabled": True,
                "update_interval": "24hours",
                "database": {"credentials_secret_name": "absent-scanner-db"},
            }
        )

        with pytest.raises(DurationParseError):
            validate(request, store)

        assert "absent-scanner-db" not in store.names


class TestOrdering:
    """Checklist order and fail-fast behavior."""

    def _full_store(self) -> RecordingSecretStore:
        return RecordingSecretStore(
            {
                (NAMESPACE, "superuser"): SUPERUSER_SECRET,
                (NAMESPACE, "config-app"): {"config-app-password": "config-pw"},
                (NAMESPACE, "pull"): {},
                (NAMESPACE, "redis"): {"password": "redis-pw"},
                (NAMESPACE, "db"): DATABASE_SECRET,
                (NAMESPACE, "extra-config"): {"extra.yaml": "x: 1"},
                (NAMESPACE, "s3-creds"): S3_SECRET,
                (NAMESPACE, "tls"): {"tls.crt": "CERT", "tls.key": "KEY"},
                (NAMESPACE, "scanner-db"): DATABASE_SECRET,
            }
        )

    def _full_request(self, **registry_overrides: object):
        registry = {
            "superuser_credentials_secret_name": "superuser",
            "config_secret_name": "config-app",
            "image_pull_secret_name": "pull",
            "database": {"credentials_secret_name": "db"},
            "config_files": [{"secret_name": "extra-config"}],
            "registry_backends": [
                {"name": "cloud", "credentials_secret_name": "s3-creds", "s3": {"storage_path": "/r", "bucket_name": "b"}}
            ],
            "external_access": {"type": "LoadBalancer", "tls": {"secret_name": "tls"}},
        }
        registry.update(registry_overrides)
        return make_request(
            registry=registry,
            cache={"credentials_secret_name": "redis"},
            scanner={"enabled": True, "database": {"credentials_secret_name": "scanner-db"}},
        )

    def test_secrets_are_fetched_in_checklist_order(self) -> None:
        from regstack.validation import validate

        store = self._full_store()

        validate(self._full_request(), store)

        assert store.names == [
            "superuser",
            "config-app",
            "pull",
            "redis",
            "db",
            "extra-config",
            "s3-creds",
            "tls",
            "scanner-db",
        ]

    def test_failure_stops_later_steps(self) -> None:
        """A failing external-access check means backends and TLS are never fetched."""
        from regstack.contracts.errors import ConfigValidationError
        from regstack.validation import validate

        store = self._full_store()
        request = self._full_request(external_access={"type": "NodePort", "tls": {"secret_name": "tls"}})

        with pytest.raises(ConfigValidationError):
            validate(request, store)

        assert "s3-creds" not in store.names
        assert "tls" not in store.names
        assert "scanner-db" not in store.names

    def test_step_names(self) -> None:
        from regstack.validation import Orchestrator

        assert Orchestrator(RecordingSecretStore()).step_names == (
            "superuser",
            "superuser_password",
            "config_secret",
            "image_pull_secrets",
            "cache_credentials",
            "database_credentials",
            "volume_sizes",
            "config_files",
            "external_access",
            "registry_backends",
            "tls",
            "scanner",
        )

    def test_custom_steps(self) -> None:
        from dataclasses import replace

        from regstack.validation import Orchestrator

        def rename(ctx, resolved):
            return replace(resolved, namespace=f"{ctx.namespace}-checked")

        resolved = Orchestrator(RecordingSecretStore(), steps=[("rename", rename)]).validate(make_request())

        assert resolved.namespace == f"{NAMESPACE}-checked"

    def test_failure_is_logged_with_step_and_kind(self, store: RecordingSecretStore) -> None:
        from structlog.testing import capture_logs

        from regstack.contracts.errors import SecretNotFoundError
        from regstack.validation import validate

        with capture_logs() as logs, pytest.raises(SecretNotFoundError):
            validate(make_request(cache={"credentials_secret_name": "redis"}), store)

        failure = next(entry for entry in logs if entry["event"] == "Validation failed")
        assert failure["step"] == "cache_credentials"
        assert failure["kind"] == "not_found"
        assert failure["log_level"] == "warning"
