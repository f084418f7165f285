"""
regstack: configuration validation for a container registry ecosystem.

Checks a declarative deployment request against externally managed secrets
and reduces it to a single resolved configuration before anything is
provisioned.
"""

__version__ = "0.3.0"
