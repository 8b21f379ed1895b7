"""Type definitions for authentication."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class UserType(str, Enum):
    """Closed set of identity classifications."""

    SAAS_ADMIN = "saas_admin"  # platform super-admin
    AGENCY_ADMIN = "agency_admin"  # tenant admin
    TEAM_MEMBER = "team_member"  # tenant staff
    CUSTOMER = "customer"  # external customer

    @classmethod
    def parse(cls, value: Any) -> "UserType | None":
        """Return the member for ``value``, or None if it is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class TokenClaims:
    """Claims embedded in a JWT token.

    Attributes:
        user_id: The authenticated identity's ID
        tenant_id: The tenant the identity belongs to
        email: Identity email at issuance
        user_type: Role classification at issuance (raw claim value)
        is_admin: Administrator flag at issuance
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
        jti: Unique token ID
        type: Token type ("access" or "refresh")
    """

    user_id: str
    tenant_id: str
    email: str
    user_type: str
    is_admin: bool = False
    exp: int = 0
    iat: int = 0
    jti: str = ""
    type: str = "access"

    @property
    def role(self) -> UserType | None:
        return UserType.parse(self.user_type)

    def identity_claims(self) -> dict[str, Any]:
        """The identity part of the claim set, as carried on the wire."""
        return {
            "userId": self.user_id,
            "tenantId": self.tenant_id,
            "email": self.email,
            "userType": self.user_type,
            "isAdmin": self.is_admin,
        }


@dataclass
class TokenPair:
    """A pair of access and refresh tokens.

    Attributes:
        access_token: Short-lived token for API access (15 min)
        refresh_token: Long-lived token for getting new access tokens (7 days)
        refresh_expires_at: Expiry stored with the refresh token record
        token_type: Always "Bearer"
        expires_in: Access token TTL in seconds
    """

    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    token_type: str = "Bearer"
    expires_in: int = 900


@dataclass
class TokenRecord:
    """Server-side ledger entry for a live refresh token."""

    id: str
    user_id: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass
class AuthResult:
    """Outcome of register/login: a credential pair plus the user projection."""

    access_token: str
    refresh_token: str
    user: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "user": self.user,
        }
