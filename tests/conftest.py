# tests/conftest.py
"""Shared test fixtures and helpers.

Secret store fakes:
- RecordingSecretStore: InMemorySecretStore that records every lookup, so
  tests can assert which secrets a failing pass did (or did not) fetch
- FailingSecretStore: raises SecretRetrievalError for every lookup

Request builders:
- make_request(): ConfigurationRequest from keyword overrides with a valid
  literal superuser, so each test only spells out what it exercises

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/core/
"""

import os
from collections.abc import Iterator, Mapping
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from regstack.contracts.errors import SecretRetrievalError
from regstack.contracts.request import ConfigurationRequest
from regstack.core.security.secret_store import InMemorySecretStore, SecretPayload

NAMESPACE = "registry"
VALID_PASSWORD = "correct-horse-battery"


class RecordingSecretStore(InMemorySecretStore):
    """InMemorySecretStore that records (namespace, name) of every get()."""

    def __init__(self, secrets: Mapping[tuple[str, str], Mapping[str, bytes | str]] | None = None) -> None:
        super().__init__(secrets)
        self.lookups: list[tuple[str, str]] = []

    def get(self, namespace: str, name: str) -> SecretPayload:
        self.lookups.append((namespace, name))
        return super().get(namespace, name)

    @property
    def names(self) -> list[str]:
        return [name for _, name in self.lookups]


class FailingSecretStore:
    """Secret store whose backend is always unavailable."""

    def get(self, namespace: str, name: str) -> SecretPayload:
        raise SecretRetrievalError(namespace, name, "connection refused")


def make_request(**overrides: Any) -> ConfigurationRequest:
    """Build a valid request, merging ``overrides`` over the defaults.

    ``registry`` overrides are merged one level deep so tests can set a
    single registry field without repeating the superuser.
    """
    registry: dict[str, Any] = {
        "superuser": {"username": "admin", "email": "admin@example.com", "password": VALID_PASSWORD},
    }
    registry.update(overrides.pop("registry", {}))
    raw: dict[str, Any] = {"namespace": NAMESPACE, "registry": registry}
    raw.update(overrides)
    return ConfigurationRequest(**raw)


@pytest.fixture
def store() -> RecordingSecretStore:
    """Empty recording store; tests add secrets with store.put()."""
    return RecordingSecretStore()


@pytest.fixture
def fingerprint_key(monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Configure REGSTACK_FINGERPRINT_KEY for the test."""
    monkeypatch.setenv("REGSTACK_FINGERPRINT_KEY", "test-fingerprint-key")
    yield "test-fingerprint-key"


@pytest.fixture(autouse=True)
def _no_fingerprint_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without a fingerprint key from the developer's shell."""
    monkeypatch.delenv("REGSTACK_FINGERPRINT_KEY", raising=False)


# =============================================================================
# Hypothesis profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
