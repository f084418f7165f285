"""Validation pass for registry deployment requests.

Usage:
    from regstack.validation import validate

    resolved = validate(request, store)
"""

from regstack.validation.backends import VARIANTS, BackendVariantSpec, resolve_backend, resolve_backends
from regstack.validation.config_files import resolve_config_files
from regstack.validation.orchestrator import Orchestrator, validate
from regstack.validation.steps import CHECKLIST, PassContext
from regstack.validation.summary import REDACTED, summarize

__all__ = [
    "CHECKLIST",
    "REDACTED",
    "VARIANTS",
    "BackendVariantSpec",
    "Orchestrator",
    "PassContext",
    "resolve_backend",
    "resolve_backends",
    "resolve_config_files",
    "summarize",
    "validate",
]
