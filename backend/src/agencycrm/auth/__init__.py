"""Authentication module for AgencyCRM.

Only the leaf modules are re-exported here. ``AuthService`` lives in
``agencycrm.auth.service`` and the route guards in
``agencycrm.auth.dependencies``.
"""

from agencycrm.auth.errors import (
    AuthError,
    Conflict,
    Forbidden,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from agencycrm.auth.jwt_service import JWTService
from agencycrm.auth.password import PasswordService
from agencycrm.auth.permissions import AccessTier, tier_allows
from agencycrm.auth.token_store import TokenStore
from agencycrm.auth.types import (
    AuthResult,
    TokenClaims,
    TokenPair,
    TokenRecord,
    UserType,
)

__all__ = [
    "AccessTier",
    "AuthError",
    "AuthResult",
    "Conflict",
    "Forbidden",
    "JWTService",
    "NotFound",
    "PasswordService",
    "TokenClaims",
    "TokenPair",
    "TokenRecord",
    "TokenStore",
    "Unauthorized",
    "UserType",
    "ValidationFailed",
    "tier_allows",
]
