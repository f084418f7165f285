# src/regstack/validation/config_files.py
"""Materialize config-file groups from secrets.

Type precedence for every file: entry type, then group type, then
DEFAULT_CONFIG_FILE_TYPE.

A group with no explicit files takes every key in its secret, in payload
order, with filename equal to the key. A group with explicit files takes
only those keys; each must be present in the secret.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from regstack.contracts.enums import ConfigFileType
from regstack.contracts.errors import ConfigValidationError
from regstack.contracts.request import ConfigFileGroup
from regstack.contracts.resolved import ConfigFileEntry
from regstack.core.security.secret_store import SecretStore
from regstack.core.security.secret_validator import RequiredKeys, resolve_secret

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE_TYPE = ConfigFileType.CONFIG


def _effective_type(*candidates: ConfigFileType | None) -> ConfigFileType:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return DEFAULT_CONFIG_FILE_TYPE


def resolve_group(store: SecretStore, namespace: str, group: ConfigFileGroup) -> list[ConfigFileEntry]:
    """Resolve one config-file group.

    Raises:
        ConfigValidationError: If the group names no secret
        SecretNotFoundError: If the secret does not exist
        MissingSecretKeyError: If an explicitly requested key is absent
    """
    if not group.secret_name:
        raise ConfigValidationError(
            "Failed to validate provided config files. `secret_name` must not be empty",
            entity="config_files",
        )

    requested = group.get_keys()
    # Explicit keys are required, so no entry is ever built from an absent key
    payload = resolve_secret(store, namespace, group.secret_name, RequiredKeys.ordered(requested))

    if not group.files:
        group_type = _effective_type(group.type)
        return [
            ConfigFileEntry(type=group_type, key=key, filename=key, content=bytes(content))
            for key, content in payload.items()
        ]

    entries: list[ConfigFileEntry] = []
    for request in group.files:
        entries.append(
            ConfigFileEntry(
                type=_effective_type(request.type, group.type),
                key=request.key,
                filename=request.output_filename,
                content=bytes(payload[request.key]),
            )
        )
    return entries


def resolve_config_files(
    store: SecretStore,
    namespace: str,
    groups: Iterable[ConfigFileGroup],
) -> tuple[ConfigFileEntry, ...]:
    """Resolve config-file groups in declaration order.

    Args:
        store: Secret store holding the file contents
        namespace: Namespace to read secrets from
        groups: Groups as declared for one component

    Returns:
        Entries in group order, then entry order within each group
    """
    entries: list[ConfigFileEntry] = []
    for group in groups:
        resolved = resolve_group(store, namespace, group)
        logger.debug("Resolved config file group", secret=group.secret_name, files=len(resolved))
        entries.extend(resolved)
    return tuple(entries)
