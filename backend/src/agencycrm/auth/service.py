"""Authentication flows: register, login, refresh, logout, introspection.

Session lifecycle::

    Unauthenticated --login/register--> Authenticated (access valid)
    Authenticated --15 min--> AccessExpired (refresh valid)
    AccessExpired --refresh--> Authenticated
    any --logout--> Revoked (token record deleted)

Refresh tokens are not rotated: the same token can be exchanged until
its record is deleted or its stored expiry passes.
"""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from agencycrm.accounts.identities import (
    Identity,
    IdentityStore,
    all_filled,
    is_valid_email,
    normalize_email,
)
from agencycrm.accounts.modules import ModuleCatalog
from agencycrm.accounts.tenants import RoleStore, TenantStore
from agencycrm.auth.errors import Conflict, NotFound, Unauthorized, ValidationFailed
from agencycrm.auth.jwt_service import REFRESH, JWTService
from agencycrm.auth.password import PasswordService
from agencycrm.auth.token_store import TokenStore
from agencycrm.auth.types import AuthResult, TokenClaims, UserType
from agencycrm.persistence.database import Database, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


class AuthService:
    """Orchestrates the password hasher, token codec and token store."""

    def __init__(
        self,
        db: Database,
        jwt_service: JWTService,
        password_service: PasswordService,
        token_store: TokenStore,
        identities: IdentityStore,
        tenants: TenantStore,
        roles: RoleStore,
        modules: ModuleCatalog,
    ):
        self._db = db
        self._jwt = jwt_service
        self._passwords = password_service
        self._tokens = token_store
        self._identities = identities
        self._tenants = tenants
        self._roles = roles
        self._modules = modules

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        company_name: str,
    ) -> AuthResult:
        """Create a tenant and its first (admin) identity, then sign in.

        All writes share one transaction: a failure part-way leaves no
        tenant, identity, grants or token record behind.

        Raises:
            ValidationFailed: If any field is blank or the email is malformed
            Conflict: If the email is already registered
        """
        email = normalize_email(email)
        if not email or not password or not all_filled(first_name, last_name, company_name):
            raise ValidationFailed("All fields are required")
        if not is_valid_email(email):
            raise ValidationFailed("Invalid email address")

        if self._identities.get_by_email(email):
            raise Conflict("User already exists")

        password_hash = await run_in_threadpool(self._passwords.hash, password)

        try:
            with self._db.begin() as conn:
                tenant = self._tenants.create(company_name, conn=conn)
                role = self._roles.admin_role(conn=conn)
                identity = self._identities.create(
                    tenant_id=tenant.id,
                    email=email,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                    user_type=UserType.AGENCY_ADMIN,
                    is_admin=True,
                    role_id=role.id,
                    conn=conn,
                )
                self._modules.enable_all_for_tenant(tenant.id, conn=conn)
                pair = self._jwt.generate_token_pair(identity)
                self._tokens.put(
                    identity.id, pair.refresh_token, pair.refresh_expires_at, conn=conn
                )
        except IntegrityError:
            # Only a concurrent registration of the same email is a conflict.
            if self._identities.get_by_email(email) is None:
                raise
            raise Conflict("User already exists")

        logger.info("Registered tenant %s with admin user %s", tenant.id, identity.id)
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=identity.to_public(),
        )

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Unknown email, wrong password and disabled account all fail with
        the same message. Earlier sessions stay valid.

        Raises:
            ValidationFailed: If email or password is missing
            Unauthorized: If the credentials do not check out
        """
        if not email or not password:
            raise ValidationFailed("Email and password are required")

        identity = self._identities.get_by_email(email)
        if identity is None:
            logger.debug("Login failed: no such email")
            raise Unauthorized(INVALID_CREDENTIALS)

        verified = await run_in_threadpool(
            self._passwords.verify, password, identity.password_hash
        )
        if not verified:
            logger.debug("Login failed for user %s: password mismatch", identity.id)
            raise Unauthorized(INVALID_CREDENTIALS)

        if not identity.is_active:
            logger.debug("Login failed for user %s: account disabled", identity.id)
            raise Unauthorized(INVALID_CREDENTIALS)

        if self._passwords.needs_rehash(identity.password_hash):
            new_hash = await run_in_threadpool(self._passwords.hash, password)
            self._identities.update(identity.id, {"password_hash": new_hash})
            logger.info("Upgraded password hash for user %s", identity.id)

        pair = self._jwt.generate_token_pair(identity)
        self._tokens.put(identity.id, pair.refresh_token, pair.refresh_expires_at)

        logger.info("User %s logged in", identity.id)
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=identity.to_public(),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        The refresh token itself is left as is.

        Raises:
            ValidationFailed: If no token was supplied
            Unauthorized: If the token is forged, expired, not a refresh
                token, has no live record, or its identity is gone
        """
        if not refresh_token:
            raise ValidationFailed("Refresh token required")

        claims = self._jwt.verify(refresh_token)
        if claims is None or claims.type != REFRESH:
            logger.info("Refresh rejected: token failed verification")
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        record = self._tokens.find(refresh_token)
        if record is None:
            logger.info("Refresh rejected for user %s: no token record", claims.user_id)
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        if record.is_expired(utcnow()):
            logger.info("Refresh rejected for user %s: record expired", claims.user_id)
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        if record.user_id != claims.user_id:
            logger.warning("Refresh rejected: record owner does not match token subject")
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        identity = self._identities.get(claims.user_id)
        if identity is None or not identity.is_active:
            logger.info("Refresh rejected for user %s: identity unavailable", claims.user_id)
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        return self._jwt.sign_access(identity)

    async def logout(self, refresh_token: str | None) -> None:
        """Revoke a refresh token. Never fails, so clients can always clear state."""
        if not refresh_token:
            return

        record = self._tokens.find(refresh_token)
        if record is not None:
            self._tokens.delete(record.id)
            logger.info("User %s logged out", record.user_id)

    async def me(self, claims: TokenClaims) -> dict[str, Any]:
        """Sanitized projection of the caller plus resolved role permissions.

        Raises:
            NotFound: If the identity no longer exists
        """
        identity = self._load(claims)

        permissions: list[str] = []
        if identity.role_id:
            role = self._roles.get(identity.role_id)
            if role:
                permissions = role.permissions

        tenant = self._tenants.get(identity.tenant_id)

        return {
            **identity.to_public(),
            "permissions": permissions,
            "tenant": {"id": tenant.id, "name": tenant.name} if tenant else None,
        }

    async def change_password(
        self, claims: TokenClaims, current_password: str, new_password: str
    ) -> None:
        """Replace the caller's password after checking the current one.

        Raises:
            ValidationFailed: If a field is missing or the current password is wrong
            NotFound: If the identity no longer exists
        """
        if not current_password or not new_password:
            raise ValidationFailed("Current and new password are required")

        identity = self._load(claims)

        verified = await run_in_threadpool(
            self._passwords.verify, current_password, identity.password_hash
        )
        if not verified:
            raise ValidationFailed("Current password is incorrect")

        new_hash = await run_in_threadpool(self._passwords.hash, new_password)
        self._identities.update(identity.id, {"password_hash": new_hash})
        logger.info("User %s changed password", identity.id)

    def _load(self, claims: TokenClaims) -> Identity:
        identity = self._identities.get(claims.user_id)
        if identity is None:
            raise NotFound("User not found")
        return identity
