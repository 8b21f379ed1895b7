"""JWT token generation and validation service."""

from __future__ import annotations

import time
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import jwt

from agencycrm.auth.types import TokenClaims, TokenPair

if TYPE_CHECKING:
    from agencycrm.accounts.identities import Identity


ACCESS = "access"
REFRESH = "refresh"


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid or malformed."""

    pass


class JWTService:
    """Service for generating and validating JWT tokens.

    Access and refresh tokens share one secret and algorithm (HS256).
    They differ in lifetime and in the ``type`` claim.
    """

    # Token TTLs
    ACCESS_TOKEN_TTL = 15 * 60  # 15 minutes
    REFRESH_TOKEN_TTL = 7 * 24 * 60 * 60  # 7 days
    LEEWAY = 5  # seconds of clock skew tolerated at verification

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_ttl: int | None = None,
        refresh_ttl: int | None = None,
        leeway: int | None = None,
    ):
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens (should be at least 32 chars)
            algorithm: JWT algorithm (default HS256)
            access_ttl: Override for the access token lifetime in seconds
            refresh_ttl: Override for the refresh token lifetime in seconds
            leeway: Override for the verification leeway in seconds
        """
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.access_ttl = self.ACCESS_TOKEN_TTL if access_ttl is None else access_ttl
        self.refresh_ttl = self.REFRESH_TOKEN_TTL if refresh_ttl is None else refresh_ttl
        self.leeway = self.LEEWAY if leeway is None else leeway

    def _claims_for(self, identity: Identity) -> dict[str, Any]:
        return {
            "userId": identity.id,
            "tenantId": identity.tenant_id,
            "email": identity.email,
            "userType": identity.user_type.value,
            "isAdmin": bool(identity.is_admin),
        }

    def _sign(self, identity: Identity, token_type: str, ttl: int, now: int) -> str:
        payload = self._claims_for(identity)
        payload.update(
            {
                "sub": identity.id,
                "iat": now,
                "exp": now + ttl,
                "jti": uuid.uuid4().hex,
                "type": token_type,
            }
        )
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def sign_access(self, identity: Identity) -> str:
        """Sign a short-lived access token for ``identity``."""
        return self._sign(identity, ACCESS, self.access_ttl, int(time.time()))

    def sign_refresh(self, identity: Identity) -> str:
        """Sign a long-lived refresh token for ``identity``."""
        return self._sign(identity, REFRESH, self.refresh_ttl, int(time.time()))

    def generate_token_pair(self, identity: Identity) -> TokenPair:
        """Generate a new access/refresh token pair.

        Both tokens carry the same identity claims. The pair's
        ``refresh_expires_at`` equals the refresh token's own ``exp``.
        """
        now = int(time.time())
        return TokenPair(
            access_token=self._sign(identity, ACCESS, self.access_ttl, now),
            refresh_token=self._sign(identity, REFRESH, self.refresh_ttl, now),
            refresh_expires_at=datetime.fromtimestamp(now + self.refresh_ttl, UTC),
            expires_in=self.access_ttl,
        )

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                leeway=self.leeway,
                options={"require": ["exp", "iat", "userId", "tenantId", "userType"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return TokenClaims(
            user_id=str(payload["userId"]),
            tenant_id=str(payload["tenantId"]),
            email=payload.get("email", ""),
            user_type=payload["userType"],
            is_admin=bool(payload.get("isAdmin", False)),
            exp=payload.get("exp", 0),
            iat=payload.get("iat", 0),
            jti=payload.get("jti", ""),
            type=payload.get("type", ACCESS),
        )

    def verify(self, token: str) -> TokenClaims | None:
        """Check signature and expiry.

        Returns:
            The decoded claims, or None for any malformed, expired or
            forged token. Never raises.
        """
        if not token:
            return None
        try:
            return self.decode_token(token)
        except JWTError:
            return None
