"""Tests for role tiers and the route guard chain."""

from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from agencycrm.accounts.identities import Identity
from agencycrm.api.app import _register_exception_handlers
from agencycrm.auth.dependencies import (
    deny_customer_access,
    require_agency_admin,
    require_auth,
    require_saas_admin,
    require_team_member,
    validate_tenant,
)
from agencycrm.auth.jwt_service import JWTService
from agencycrm.auth.middleware import extract_bearer_token
from agencycrm.auth.permissions import (
    AccessTier,
    forbidden_message,
    is_customer,
    tier_allows,
)
from agencycrm.auth.types import UserType
from conftest import TEST_SECRET, bearer


# ── Helpers ──────────────────────────────────────────────────────────────────


def make_identity(user_type: UserType, tenant_id: str = "t1") -> Identity:
    return Identity(
        id=f"u-{user_type.value}",
        tenant_id=tenant_id,
        email=f"{user_type.value}@example.com",
        password_hash="x",
        first_name="Test",
        last_name="User",
        user_type=user_type,
    )


@pytest.fixture
def jwt_service():
    return JWTService(TEST_SECRET)


@pytest.fixture
def guarded(jwt_service):
    """A bare app exposing one route per guard combination."""
    app = FastAPI()
    app.state.services = SimpleNamespace(jwt_service=jwt_service)
    _register_exception_handlers(app)

    @app.get("/auth")
    def auth_only(claims=Depends(require_auth)):
        return {"userId": claims.user_id}

    @app.get("/tenant", dependencies=[Depends(require_auth), Depends(validate_tenant)])
    def tenant_scoped():
        return {"ok": True}

    @app.get("/no-auth-tenant", dependencies=[Depends(validate_tenant)])
    def tenant_without_auth():
        return {"ok": True}

    @app.get("/saas", dependencies=[Depends(require_saas_admin)])
    def saas():
        return {"ok": True}

    @app.get("/agency", dependencies=[Depends(require_agency_admin)])
    def agency():
        return {"ok": True}

    @app.get("/team", dependencies=[Depends(require_team_member)])
    def team():
        return {"ok": True}

    @app.get("/mutate", dependencies=[Depends(deny_customer_access)])
    def mutate():
        return {"ok": True}

    return TestClient(app)


def token_for(jwt_service, user_type: UserType) -> str:
    return jwt_service.sign_access(make_identity(user_type))


# ── Tier membership ──────────────────────────────────────────────────────────


class TestTierAllows:
    @pytest.mark.parametrize(
        "tier,allowed",
        [
            (AccessTier.SAAS_ADMIN, {UserType.SAAS_ADMIN}),
            (AccessTier.AGENCY_ADMIN, {UserType.SAAS_ADMIN, UserType.AGENCY_ADMIN}),
            (
                AccessTier.TEAM_MEMBER,
                {UserType.SAAS_ADMIN, UserType.AGENCY_ADMIN, UserType.TEAM_MEMBER},
            ),
        ],
    )
    def test_allow_sets(self, tier, allowed):
        for role in UserType:
            assert tier_allows(tier, role) is (role in allowed)

    def test_allow_sets_are_nested(self):
        for role in UserType:
            if tier_allows(AccessTier.SAAS_ADMIN, role):
                assert tier_allows(AccessTier.AGENCY_ADMIN, role)
            if tier_allows(AccessTier.AGENCY_ADMIN, role):
                assert tier_allows(AccessTier.TEAM_MEMBER, role)

    def test_accepts_raw_role_strings(self):
        assert tier_allows(AccessTier.AGENCY_ADMIN, "agency_admin") is True

    @pytest.mark.parametrize("role", ["Agency_Admin", "admin", "", None, "saas-admin"])
    def test_unknown_roles_match_no_tier(self, role):
        for tier in AccessTier:
            assert tier_allows(tier, role) is False

    def test_customer_matches_no_tier(self):
        for tier in AccessTier:
            assert tier_allows(tier, UserType.CUSTOMER) is False

    def test_is_customer(self):
        assert is_customer("customer") is True
        assert is_customer(UserType.TEAM_MEMBER) is False
        assert is_customer("bogus") is False

    def test_forbidden_message_names_tier(self):
        assert forbidden_message(AccessTier.AGENCY_ADMIN) == "Agency admin access required"


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            (None, None),
            ("", None),
            ("Bearer ", None),
            ("Basic dXNlcjpwYXNz", None),
            ("bearer abc", None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected


# ── Guard chain over HTTP ────────────────────────────────────────────────────


class TestRequireAuth:
    def test_missing_header_is_401(self, guarded):
        response = guarded.get("/auth")
        assert response.status_code == 401
        assert response.json() == {"message": "Authentication required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_malformed_header_is_401(self, guarded):
        response = guarded.get("/auth", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_invalid_token_is_401(self, guarded):
        response = guarded.get("/auth", headers=bearer("not-a-jwt"))
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid or expired token"}

    def test_expired_token_is_401_with_same_message(self, guarded):
        expired = JWTService(TEST_SECRET, access_ttl=-60, leeway=0)
        token = expired.sign_access(make_identity(UserType.AGENCY_ADMIN))

        response = guarded.get("/auth", headers=bearer(token))
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid or expired token"}

    def test_refresh_token_is_not_an_access_token(self, guarded, jwt_service):
        token = jwt_service.sign_refresh(make_identity(UserType.AGENCY_ADMIN))
        assert guarded.get("/auth", headers=bearer(token)).status_code == 401

    def test_valid_token_passes_claims(self, guarded, jwt_service):
        token = token_for(jwt_service, UserType.TEAM_MEMBER)
        response = guarded.get("/auth", headers=bearer(token))
        assert response.status_code == 200
        assert response.json() == {"userId": "u-team_member"}


class TestValidateTenant:
    def test_passes_after_require_auth(self, guarded, jwt_service):
        token = token_for(jwt_service, UserType.CUSTOMER)
        assert guarded.get("/tenant", headers=bearer(token)).status_code == 200

    def test_without_require_auth_is_401(self, guarded, jwt_service):
        token = token_for(jwt_service, UserType.AGENCY_ADMIN)
        response = guarded.get("/no-auth-tenant", headers=bearer(token))
        assert response.status_code == 401


class TestRoleGuards:
    @pytest.mark.parametrize(
        "path,user_type,status",
        [
            ("/saas", UserType.SAAS_ADMIN, 200),
            ("/saas", UserType.AGENCY_ADMIN, 403),
            ("/saas", UserType.TEAM_MEMBER, 403),
            ("/saas", UserType.CUSTOMER, 403),
            ("/agency", UserType.SAAS_ADMIN, 200),
            ("/agency", UserType.AGENCY_ADMIN, 200),
            ("/agency", UserType.TEAM_MEMBER, 403),
            ("/agency", UserType.CUSTOMER, 403),
            ("/team", UserType.SAAS_ADMIN, 200),
            ("/team", UserType.AGENCY_ADMIN, 200),
            ("/team", UserType.TEAM_MEMBER, 200),
            ("/team", UserType.CUSTOMER, 403),
            ("/mutate", UserType.SAAS_ADMIN, 200),
            ("/mutate", UserType.TEAM_MEMBER, 200),
            ("/mutate", UserType.CUSTOMER, 403),
        ],
    )
    def test_status(self, guarded, jwt_service, path, user_type, status):
        response = guarded.get(path, headers=bearer(token_for(jwt_service, user_type)))
        assert response.status_code == status

    def test_forbidden_names_required_tier(self, guarded, jwt_service):
        token = token_for(jwt_service, UserType.TEAM_MEMBER)
        response = guarded.get("/agency", headers=bearer(token))
        assert response.json() == {"message": "Agency admin access required"}

    def test_customer_denial_message(self, guarded, jwt_service):
        token = token_for(jwt_service, UserType.CUSTOMER)
        response = guarded.get("/mutate", headers=bearer(token))
        assert response.json() == {"message": "Customers cannot perform this action"}

    def test_role_guard_without_token_is_401(self, guarded):
        assert guarded.get("/agency").status_code == 401
