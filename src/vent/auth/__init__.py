"""Authentication and authorization for the Vent admin."""

from vent.auth.jwt_service import JWTService
from vent.auth.password import PasswordService
from vent.auth.permissions import (
    PERMISSION_EDGES,
    SUPERUSER_FIELD,
    authorize,
    collect_permissions,
    require_permissions,
    schema_permissions,
)
from vent.auth.types import (
    Claims,
    CredentialAuthenticator,
    CredentialGenerator,
    TokenAuthenticator,
    TokenGenerator,
)

__all__ = [
    "Claims",
    "CredentialAuthenticator",
    "CredentialGenerator",
    "JWTService",
    "PERMISSION_EDGES",
    "PasswordService",
    "SUPERUSER_FIELD",
    "TokenAuthenticator",
    "TokenGenerator",
    "authorize",
    "collect_permissions",
    "require_permissions",
    "schema_permissions",
]
