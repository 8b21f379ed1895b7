"""Authentication API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from agencycrm.api.container import Services, get_services
from agencycrm.auth.dependencies import require_auth
from agencycrm.auth.types import TokenClaims


class CamelModel(BaseModel):
    """Request body read from camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request body for registration. Presence is checked by the service."""

    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    company_name: str = ""


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class RefreshRequest(CamelModel):
    refresh_token: str = ""


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = ""
    new_password: str = ""


def create_auth_router() -> APIRouter:
    """Create the /api/auth router."""
    router = APIRouter(prefix="/api/auth", tags=["auth"])

    @router.post("/register", status_code=201)
    async def register(
        body: RegisterRequest, services: Services = Depends(get_services)
    ) -> dict[str, Any]:
        """Create a tenant with its first admin and sign them in."""
        result = await services.auth_service.register(
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            company_name=body.company_name,
        )
        return result.to_dict()

    @router.post("/login")
    async def login(
        body: LoginRequest, services: Services = Depends(get_services)
    ) -> dict[str, Any]:
        result = await services.auth_service.login(body.email, body.password)
        return result.to_dict()

    @router.post("/refresh")
    async def refresh(
        body: RefreshRequest, services: Services = Depends(get_services)
    ) -> dict[str, Any]:
        """Exchange a refresh token for a fresh access token."""
        access_token = await services.auth_service.refresh(body.refresh_token)
        return {"accessToken": access_token}

    @router.post("/logout")
    async def logout(
        body: LogoutRequest | None = None,
        claims: TokenClaims = Depends(require_auth),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        """Revoke the supplied refresh token.

        Succeeds whether or not the token was known, so the client can
        always clear its local state.
        """
        await services.auth_service.logout(body.refresh_token if body else None)
        return {"message": "Logged out successfully"}

    @router.get("/me")
    async def me(
        claims: TokenClaims = Depends(require_auth),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        return await services.auth_service.me(claims)

    @router.post("/change-password")
    async def change_password(
        body: ChangePasswordRequest,
        claims: TokenClaims = Depends(require_auth),
        services: Services = Depends(get_services),
    ) -> dict[str, Any]:
        await services.auth_service.change_password(
            claims, body.current_password, body.new_password
        )
        return {"message": "Password changed successfully"}

    return router
