# src/regstack/validation/keys.py
"""Secret key names the validation steps require or project.

These are part of the external contract: operators create secrets with
exactly these keys.
"""

from regstack.core.security.secret_validator import RequiredKeys

# Superuser
SUPERUSER_USERNAME_KEY = "superuser-username"
SUPERUSER_PASSWORD_KEY = "superuser-password"
SUPERUSER_EMAIL_KEY = "superuser-email"

SUPERUSER_CREDENTIAL_KEYS = RequiredKeys.named(
    {
        SUPERUSER_USERNAME_KEY: "Superuser Username",
        SUPERUSER_PASSWORD_KEY: "Superuser Password",
        SUPERUSER_EMAIL_KEY: "Superuser Email",
    }
)

MIN_SUPERUSER_PASSWORD_LENGTH = 8

# Config app
CONFIG_PASSWORD_KEY = "config-app-password"

CONFIG_CREDENTIAL_KEYS = RequiredKeys.named({CONFIG_PASSWORD_KEY: "Config App Password"})

# Cache
CACHE_PASSWORD_KEY = "password"

CACHE_CREDENTIAL_KEYS = RequiredKeys.ordered([CACHE_PASSWORD_KEY])

# Database (registry and scanner)
DATABASE_USERNAME_KEY = "database-username"
DATABASE_PASSWORD_KEY = "database-password"
DATABASE_NAME_KEY = "database-name"
DATABASE_SERVER_KEY = "database-server"
DATABASE_ROOT_PASSWORD_KEY = "database-root-password"

DATABASE_CREDENTIAL_KEYS = RequiredKeys.ordered([DATABASE_USERNAME_KEY, DATABASE_PASSWORD_KEY, DATABASE_NAME_KEY])

# TLS (kubernetes.io/tls layout)
TLS_CERT_KEY = "tls.crt"
TLS_PRIVATE_KEY_KEY = "tls.key"

TLS_CERTIFICATE_KEYS = RequiredKeys.ordered([TLS_CERT_KEY, TLS_PRIVATE_KEY_KEY])

# Registry backends
ACCESS_KEY_KEY = "accessKey"
SECRET_KEY_KEY = "secretKey"
AZURE_ACCOUNT_NAME_KEY = "accountName"
AZURE_ACCOUNT_KEY_KEY = "accountKey"
AZURE_SAS_TOKEN_KEY = "sasToken"
SWIFT_USER_KEY = "user"
SWIFT_PASSWORD_KEY = "password"
