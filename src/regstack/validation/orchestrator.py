# src/regstack/validation/orchestrator.py
"""Orchestrator for one validation pass.

Coordinates:
- Superuser and config-app credentials
- Image pull secrets and cache credentials
- Registry database, volume sizes and config files
- External access, registry backends and TLS material
- Scanner components

The pass is fail-fast: the first failing step aborts it, and later steps
never run (so no later secret is fetched). The step functions themselves
live in steps.py; the orchestrator only sequences them and logs.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from regstack.contracts.errors import RegstackError
from regstack.contracts.request import ConfigurationRequest
from regstack.contracts.resolved import ResolvedConfiguration
from regstack.core.security.secret_store import SecretStore
from regstack.validation.steps import CHECKLIST, PassContext, Step

logger = structlog.get_logger(__name__)


class Orchestrator:
    """Runs the validation checklist against a secret store.

    The store is the only collaborator: requests are passed per call, so
    one orchestrator may validate any number of requests.
    """

    def __init__(self, store: SecretStore, *, steps: Sequence[tuple[str, Step]] = CHECKLIST) -> None:
        self._store = store
        self._steps = tuple(steps)

    @property
    def step_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._steps)

    def validate(self, request: ConfigurationRequest) -> ResolvedConfiguration:
        """Validate a request and resolve everything it references.

        Args:
            request: The configuration request. Never modified.

        Returns:
            The resolved configuration

        Raises:
            RegstackError: The first failure, unchanged
        """
        ctx = PassContext(request=request, store=self._store)
        resolved = ResolvedConfiguration(namespace=request.namespace)

        for name, step in self._steps:
            logger.debug("Running validation step", step=name, namespace=request.namespace)
            try:
                resolved = step(ctx, resolved)
            except RegstackError as exc:
                logger.warning(
                    "Validation failed",
                    step=name,
                    kind=exc.kind,
                    namespace=request.namespace,
                    error=str(exc),
                )
                raise

        logger.info(
            "Validation passed",
            namespace=request.namespace,
            backends=len(resolved.registry_backends),
            config_files=len(resolved.config_files),
            scanner=request.scanner_enabled,
        )
        return resolved


def validate(request: ConfigurationRequest, store: SecretStore) -> ResolvedConfiguration:
    """Run one validation pass with the default checklist."""
    return Orchestrator(store).validate(request)
