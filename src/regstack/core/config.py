# src/regstack/core/config.py
"""
Request loading for regstack.

Uses Dynaconf for multi-source loading and Pydantic for validation.
The loaded ConfigurationRequest is frozen.
"""

import os
import re
from pathlib import Path
from typing import Any

from regstack.contracts.request import ConfigurationRequest

# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

# Dynaconf bookkeeping keys that are not part of the request
_INTERNAL_KEYS = frozenset({"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"})


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    A reference with no value and no default is left untouched so the
    literal shows up in the eventual validation error.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_request(config_path: Path) -> ConfigurationRequest:
    """Load a configuration request from YAML with environment overrides.

    Precedence:
    1. Environment variables (REGSTACK_*) - highest priority
    2. Request file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: REGSTACK_REGISTRY__skip_setup=true for
    nested keys.

    Args:
        config_path: Path to the request YAML file

    Returns:
        Validated ConfigurationRequest

    Raises:
        FileNotFoundError: If the request file doesn't exist
        ValidationError: If the request fails schema validation
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Request file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="REGSTACK",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in _INTERNAL_KEYS}
    raw_config = _expand_env_vars(raw_config)

    return ConfigurationRequest(**raw_config)


def request_from_dict(raw: dict[str, Any]) -> ConfigurationRequest:
    """Build a request from an already-parsed mapping (env vars expanded)."""
    return ConfigurationRequest(**_expand_env_vars(raw))
