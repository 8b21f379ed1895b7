"""FastAPI dependencies that make up the authorization guard chain.

``require_auth`` must run first; it verifies the bearer token once and
attaches the claims to the request. The role guards depend on it, and
FastAPI's per-request dependency cache means the token is verified once
no matter how many guards a route stacks.

Example:
    @router.get("/staff", dependencies=[Depends(require_agency_admin)])
    async def list_staff(...):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from agencycrm.auth.errors import Forbidden, Unauthorized
from agencycrm.auth.jwt_service import ACCESS, JWTService
from agencycrm.auth.middleware import (
    extract_bearer_token,
    get_user_context,
    set_user_context,
)
from agencycrm.auth.permissions import (
    AccessTier,
    forbidden_message,
    is_customer,
    tier_allows,
)
from agencycrm.auth.types import TokenClaims


def get_jwt_service(request: Request) -> JWTService:
    return request.app.state.services.jwt_service


def require_auth(request: Request) -> TokenClaims:
    """Verify the bearer access token and attach its claims.

    Raises:
        Unauthorized: If the header is missing or malformed, or the
            token is forged, expired, or not an access token
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise Unauthorized("Authentication required")

    claims = get_jwt_service(request).verify(token)
    if claims is None or claims.type != ACCESS:
        raise Unauthorized("Invalid or expired token")

    set_user_context(request, claims)
    return claims


def validate_tenant(request: Request) -> TokenClaims:
    """Require that ``require_auth`` has already attached a tenant-bearing identity.

    Tenant isolation itself is enforced by the stores, which filter on
    the claims' tenant id.
    """
    claims = get_user_context(request)
    if claims is None or not claims.tenant_id:
        raise Unauthorized("Authentication required")
    return claims


def require_tier(tier: AccessTier) -> Callable[[TokenClaims], TokenClaims]:
    """Create a dependency that admits only roles in ``tier``'s allow-set."""

    def dependency(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
        if not tier_allows(tier, claims.role):
            raise Forbidden(forbidden_message(tier))
        return claims

    return dependency


require_saas_admin = require_tier(AccessTier.SAAS_ADMIN)
require_agency_admin = require_tier(AccessTier.AGENCY_ADMIN)
require_team_member = require_tier(AccessTier.TEAM_MEMBER)


def deny_customer_access(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
    """Reject external customers regardless of any other check."""
    if is_customer(claims.role):
        raise Forbidden("Customers cannot perform this action")
    return claims
